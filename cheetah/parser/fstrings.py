"""
F-string support.

The lexer hands over an f-string's payload undecoded. FStringParser splits it
into literal text and `{expression!conversion:format_spec}` replacement
fields; each expression is parsed by a fresh parser supplied by the caller.
"""

import typing
from typing import Callable, Optional

from ..lexer.escapes import EscapeError, decode_escapes
from ..lexer.lexer import QUOTES, offset_position
from ..lexer.tokens import Token
from .ast_nodes import Expression, Str, FormattedValue, JoinedStr, walk
from .errors import ParseError, create_syntax_error

CONVERSIONS = ("s", "r", "a")


def string_prefix(lexeme: str) -> str:
    """Return the prefix letters of a string literal's lexeme."""
    for index, char in enumerate(lexeme):
        if char in QUOTES:
            return lexeme[:index]
    return lexeme


class FStringParser:
    """Split one FORMAT_STRING token into Str and FormattedValue parts."""

    def __init__(self, token: Token, parse_expression: Callable[[str], Expression]):
        prefix = string_prefix(token.lexeme)
        quote_length = 3 if token.lexeme[len(prefix):len(prefix) + 3] in ('"""', "'''") else 1
        self.token = token
        self.payload: str = token.value
        self.raw = "r" in prefix.lower()
        self.parse_expression = parse_expression
        self.line, self.column = offset_position(token.lexeme, len(prefix) + quote_length,
                                                 token.line, token.column)

    def parse(self) -> typing.List[Expression]:
        return self._parse_parts(0, len(self.payload))

    def _position(self, offset: int) -> typing.Tuple[int, int]:
        return offset_position(self.payload, offset, self.line, self.column)

    def _error(self, message: str, offset: int) -> ParseError:
        line, column = self._position(offset)
        return create_syntax_error(message, line, column, code="P011")

    def _parse_parts(self, start: int, end: int) -> typing.List[Expression]:
        parts = []
        literal = []
        literal_start = start
        payload = self.payload
        i = start
        while i < end:
            char = payload[i]
            if char == "{":
                if i + 1 < end and payload[i + 1] == "{":
                    literal.append("{")
                    i += 2
                    continue
                self._flush_literal(parts, literal, literal_start)
                i = self._parse_field(parts, i, end)
                literal_start = i
            elif char == "}":
                if i + 1 < end and payload[i + 1] == "}":
                    literal.append("}")
                    i += 2
                    continue
                raise self._error("Single '}' is not allowed in f-string", i)
            elif char == "\\" and not self.raw and payload.startswith("N{", i + 1):
                # \N{NAME} braces are not a replacement field
                close = payload.find("}", i)
                if close == -1 or close >= end:
                    raise self._error("Unterminated \\N{...} escape in f-string", i)
                literal.append(payload[i:close + 1])
                i = close + 1
            else:
                literal.append(char)
                i += 1

        self._flush_literal(parts, literal, literal_start)
        return parts

    def _flush_literal(self, parts: list, literal: list, offset: int):
        if not literal:
            return
        text = "".join(literal)
        literal.clear()
        if not self.raw:
            try:
                text = decode_escapes(text)
            except EscapeError as error:
                raise self._error(error.message, offset + error.offset) from error
        line, column = self._position(offset)
        parts.append(Str(text, line=line, column=column))

    def _parse_field(self, parts: list, start: int, end: int) -> int:
        """Parse the field opening at `start`; return the offset after its `}`."""
        conversion_at, spec_at, close = self._scan_field(start, end)
        expression_end = min(index for index in (conversion_at, spec_at, close) if index is not None)
        text = self.payload[start + 1:expression_end]
        if not text.strip():
            raise self._error("f-string: empty expression not allowed", start)

        value = self._parse_field_expression(text, start + 1)

        conversion = None
        if conversion_at is not None:
            conversion_end = spec_at if spec_at is not None else close
            conversion = self.payload[conversion_at + 1:conversion_end]
            if conversion not in CONVERSIONS:
                raise self._error(
                    f"Invalid conversion character '{conversion}': expected 's', 'r', or 'a'",
                    conversion_at + 1)

        format_spec: Optional[Expression] = None
        if spec_at is not None:
            line, column = self._position(spec_at + 1)
            format_spec = JoinedStr(self._parse_parts(spec_at + 1, close), line=line, column=column)

        line, column = self._position(start)
        parts.append(FormattedValue(value, conversion, format_spec, line=line, column=column))
        return close + 1

    def _scan_field(self, start: int, end: int):
        """
        Find the `!` conversion, `:` format spec and closing `}` of a field.

        Brackets and quoted strings inside the expression are skipped, so
        `{d["k"]}` and `{f(a, b)}` close where expected.
        """
        payload = self.payload
        depth = 0
        conversion_at = spec_at = None
        i = start + 1
        while i < end:
            char = payload[i]
            if spec_at is None and char in QUOTES:
                closing = payload.find(char, i + 1, end)
                if closing == -1:
                    break
                i = closing + 1
                continue
            if char == "}":
                if depth == 0:
                    return conversion_at, spec_at, i
                depth -= 1
            elif char == "{":
                depth += 1
            elif spec_at is None and char in "([":
                depth += 1
            elif spec_at is None and char in ")]":
                depth -= 1
            elif depth == 0 and spec_at is None:
                if char == "!" and conversion_at is None and payload[i + 1:i + 2] != "=":
                    conversion_at = i
                elif char == ":":
                    spec_at = i
            i += 1
        raise self._error("Unterminated expression in f-string: missing '}'", start)

    def _parse_field_expression(self, text: str, offset: int) -> Expression:
        try:
            expr = self.parse_expression(text)
        except ParseError as error:
            raise self._error(f"Invalid expression in f-string: {error.message}", offset) from error

        # The sub-parser saw "(" + text + ")" starting at line 1, column 1
        base_line, base_column = self._position(offset)
        for node in walk(expr):
            if not getattr(node, "line", 0):
                continue
            if node.line == 1:
                node.column = base_column + node.column - 2
                node.line = base_line
            else:
                node.line = base_line + node.line - 1
        return expr


def join_string_parts(parts: typing.List[Expression], line: int, column: int) -> Expression:
    """
    Merge adjacent literal parts and build the final string node.

    A result made only of literal text collapses to a single Str.
    """
    merged = []
    for part in parts:
        if isinstance(part, Str) and merged and isinstance(merged[-1], Str):
            previous = merged[-1]
            merged[-1] = Str(previous.value + part.value, line=previous.line, column=previous.column)
        else:
            merged.append(part)

    if not merged:
        return Str("", line=line, column=column)
    if len(merged) == 1 and isinstance(merged[0], Str):
        return Str(merged[0].value, line=line, column=column)
    return JoinedStr(merged, line=line, column=column)
