"""
Cheetah Lexer - turns source text into a token stream

The tricky parts are all about layout: INDENT/DEDENT synthesis from an
indent stack, implicit line joining while any bracket is open, and explicit
joining with a trailing backslash. Strings come in four flavors (plain, raw,
formatted, bytes), each single- or triple-quoted.

Errors never stop the lexer. A bad lexeme is recorded as a LexerError and
replaced by an INVALID token covering the same span, so positions further
down the stream stay meaningful for the parser.

xwest
"""

import logging
import re
from typing import List, Optional, Tuple

from .config import LexerConfig, DEFAULT_CONFIG
from .escapes import EscapeError, decode_escapes
from .tokens import Token, TokenType, KEYWORDS, OPERATORS
from .errors import (
    LexerError, create_unexpected_character_error,
    create_unterminated_string_error, create_invalid_number_error,
    create_invalid_escape_error,
)

LOGGER = logging.getLogger(__name__)

STRING_PREFIXES = {"r", "f", "b", "rb", "br", "rf", "fr"}

QUOTES = "\"'"

# Flavor name -> (single-quoted message, triple-quoted message)
UNTERMINATED_MESSAGES = {
    "plain": ("Unterminated string literal", "Unterminated triple-quoted string"),
    "raw": ("Unterminated raw string literal", "Unterminated raw triple-quoted string"),
    "format": ("Unterminated f-string literal", "Unterminated triple-quoted f-string"),
    "bytes": ("Unterminated bytes literal", "Unterminated bytes triple-quoted string"),
}

NUMBER_BASES = {
    "b": (2, TokenType.BINARY, "binary"),
    "o": (8, TokenType.OCTAL, "octal"),
    "x": (16, TokenType.HEXADECIMAL, "hex"),
}


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_identifier_start(char: str) -> bool:
    return char == "_" or char.isidentifier()


def _is_identifier_char(char: str) -> bool:
    return _is_digit(char) or ("a" + char).isidentifier()


class Lexer:
    """
    Cheetah lexical analyzer.

    One instance lexes one source buffer. All state (cursor, indent stack,
    bracket counters, collected errors) lives on the instance, so lexers
    for different sources are independent.
    """

    def __init__(self, source: str, config: Optional[LexerConfig] = None):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            config: Lexer options, defaults to LexerConfig()
        """
        self.source = source
        self.config = config or DEFAULT_CONFIG
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[LexerError] = []

        self._lines = re.split(r"\r\n|\r|\n", source)
        self._indent_stack = [0]
        self._paren_depth = 0
        self._bracket_depth = 0
        self._brace_depth = 0
        self._at_line_start = True
        self._indent_error_lines = set()

        self._compile_patterns()

    def _compile_patterns(self):
        """Compile the patterns that validate numeric literal spellings."""
        digits = r"\d(?:_?\d)*"
        self.integer_pattern = re.compile(digits)
        self.float_pattern = re.compile(
            rf"(?:{digits})?\.{digits}(?:[eE][+-]?{digits})?|{digits}[eE][+-]?{digits}"
        )
        self.prefixed_patterns = {
            "b": re.compile(r"_?[01](?:_?[01])*"),
            "o": re.compile(r"_?[0-7](?:_?[0-7])*"),
            "x": re.compile(r"_?[0-9a-fA-F](?:_?[0-9a-fA-F])*"),
        }

    @property
    def _bracket_level(self) -> int:
        return self._paren_depth + self._bracket_depth + self._brace_depth

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens ending with EOF. Errors are available in self.errors.
        """
        while True:
            if self._at_line_start and self._bracket_level == 0:
                if not self._start_logical_line():
                    break
            if self._is_at_end():
                break

            start_pos, line, column = self.pos, self.line, self.column
            try:
                self._scan_token()
            except LexerError as error:
                self.errors.append(error)
                if self.pos == start_pos:
                    self._advance()
                self._add_token(TokenType.INVALID, self.source[start_pos:self.pos],
                                line, column, error.message)

        while len(self._indent_stack) > 1:
            self._indent_stack.pop()
            self._add_token(TokenType.DEDENT, "", self.line, self.column)
        self._add_token(TokenType.EOF, "", self.line, self.column)

        LOGGER.debug("Tokenized %d characters into %d tokens with %d error(s)",
                     len(self.source), len(self.tokens), len(self.errors))
        return self.tokens

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _start_logical_line(self) -> bool:
        """
        Measure the indentation of the next non-blank line and emit layout tokens.

        Blank and comment-only lines are consumed here. Returns False when
        only whitespace remains before the end of input.
        """
        while True:
            line_start = self.pos
            width = 0
            has_tab = False
            while not self._is_at_end() and self._current() in " \t\f":
                char = self._current()
                if char == " ":
                    width += 1
                elif char == "\t":
                    width += self.config.tab_width
                    has_tab = True
                else:
                    width = 0
                self._advance()

            if self._is_at_end():
                return False

            char = self._current()
            if char == "#":
                self._skip_comment()
                if self._is_at_end():
                    return False
                self._consume_newline()
                continue
            if char in "\r\n":
                self._consume_newline()
                continue

            self._apply_indentation(width, self.source[line_start:self.pos], has_tab)
            self._at_line_start = False
            return True

    def _apply_indentation(self, width: int, indent_text: str, has_tab: bool):
        line = self.line
        if has_tab and not self.config.allow_tabs_in_indentation:
            self._indentation_error("Tabs are not allowed in indentation",
                                    "Use spaces only for indentation", code="L006")

        top = self._indent_stack[-1]
        if width > top:
            step = self.config.standard_indent_size
            if self.config.enforce_indent_consistency and width % step != 0:
                self._indentation_error(
                    f"Inconsistent indentation. Expected multiple of {step} spaces but got {width}.",
                    f"Use {step} spaces for indentation",
                )
            self._indent_stack.append(width)
            self._add_token(TokenType.INDENT, indent_text, line, 1)
        elif width < top:
            while self._indent_stack[-1] > width:
                self._indent_stack.pop()
                self._add_token(TokenType.DEDENT, "", line, 1)
            if self._indent_stack[-1] != width:
                self._indentation_error(
                    f"Inconsistent indentation. Current indent level {width} "
                    f"doesn't match any previous level.",
                    "Ensure indentation matches a previous level",
                )

    def _indentation_error(self, message: str, suggestion: str, code: str = "L005"):
        # One indentation diagnostic per line is enough
        if self.line in self._indent_error_lines:
            return
        self._indent_error_lines.add(self.line)
        self.errors.append(LexerError(message, self.line, 1, code=code,
                                      snippet=self._line_text(self.line),
                                      suggestion=suggestion))

    # ------------------------------------------------------------------
    # Token dispatch
    # ------------------------------------------------------------------

    def _scan_token(self):
        char = self._current()

        if char in " \t\f":
            self._advance()
        elif char == "#":
            self._skip_comment()
        elif char in "\r\n":
            if self._bracket_level > 0:
                self._consume_newline()
            else:
                self._add_token(TokenType.NEWLINE, "\n", self.line, self.column)
                self._consume_newline()
                self._at_line_start = True
        elif char == "\\":
            self._scan_line_continuation()
        elif _is_digit(char) or (char == "." and _is_digit(self._peek())):
            self._scan_number()
        elif char in QUOTES:
            self._scan_string("")
        elif _is_identifier_start(char):
            self._scan_identifier_or_prefixed_string()
        else:
            self._scan_operator()

    def _scan_line_continuation(self):
        line, column = self.line, self.column
        self._advance()

        if not self.config.strict_line_joining:
            while not self._is_at_end() and self._current() in " \t":
                self._advance()
            if not self._is_at_end() and self._current() == "#":
                self._skip_comment()

        if self._is_at_end():
            raise LexerError("Unexpected end of file after line continuation character",
                             line, column, code="L007", snippet=self._line_text(line))
        if self._current() in "\r\n":
            self._consume_newline()
            return

        raise LexerError(
            "Unexpected character after line continuation character",
            line, column, code="L007", snippet=self._line_text(line),
            suggestion="The backslash must be the last character on the line",
        )

    def _scan_identifier_or_prefixed_string(self):
        start = self.pos
        end = start
        while end < len(self.source) and _is_identifier_char(self.source[end]):
            end += 1
        word = self.source[start:end]

        if word.lower() in STRING_PREFIXES and end < len(self.source) and self.source[end] in QUOTES:
            self._scan_string(word)
            return

        line, column = self.line, self.column
        self._advance_by(end - start)
        token_type = KEYWORDS.get(word)
        if token_type is not None:
            self._add_token(token_type, word, line, column)
        else:
            self._add_token(TokenType.IDENTIFIER, word, line, column, word)

    def _scan_operator(self):
        line, column = self.line, self.column
        for size in (3, 2, 1):
            text = self.source[self.pos:self.pos + size]
            if len(text) == size and text in OPERATORS:
                break
        else:
            char = self._current()
            self._advance()
            raise create_unexpected_character_error(char, line, column, self._line_text(line))

        token_type = OPERATORS[text]
        self._advance_by(size)

        if token_type is TokenType.SEMICOLON and not self.config.allow_trailing_semicolon:
            raise LexerError("Semicolons are not used in Python-like syntax", line, column,
                             code="L009", snippet=self._line_text(line),
                             suggestion="Remove the semicolon")

        self._track_bracket(token_type)
        self._add_token(token_type, text, line, column)

    def _track_bracket(self, token_type: TokenType):
        if token_type is TokenType.LEFT_PAREN:
            self._paren_depth += 1
        elif token_type is TokenType.RIGHT_PAREN:
            self._paren_depth = max(0, self._paren_depth - 1)
        elif token_type is TokenType.LEFT_BRACKET:
            self._bracket_depth += 1
        elif token_type is TokenType.RIGHT_BRACKET:
            self._bracket_depth = max(0, self._bracket_depth - 1)
        elif token_type is TokenType.LEFT_BRACE:
            self._brace_depth += 1
        elif token_type is TokenType.RIGHT_BRACE:
            self._brace_depth = max(0, self._brace_depth - 1)

    # ------------------------------------------------------------------
    # Numbers
    # ------------------------------------------------------------------

    def _scan_number(self):
        start, line, column = self.pos, self.line, self.column

        if self._current() == "0" and self._peek().lower() in NUMBER_BASES:
            self._scan_prefixed_integer(start, line, column)
            return

        is_float = False
        if self._current() == ".":
            self._advance()
            self._consume_digits()
            is_float = True
        else:
            self._consume_digits()
            if self._current() == "." and _is_digit(self._peek()):
                self._advance()
                self._consume_digits()
                is_float = True

        if is_float and self._current() == "." and _is_digit(self._peek()):
            self._advance()
            self._consume_digits()
            raise create_invalid_number_error("Invalid number format: multiple decimal points",
                                              line, column, self._line_text(line))

        if self._current() in ("e", "E"):
            self._scan_exponent(line, column)
            is_float = True

        kind = "float" if is_float else "integer"
        if not self._is_at_end() and _is_identifier_char(self._current()):
            while not self._is_at_end() and _is_identifier_char(self._current()):
                self._advance()
            raise create_invalid_number_error(
                f"Invalid {kind} literal: {self.source[start:self.pos]}",
                line, column, self._line_text(line))

        text = self.source[start:self.pos]
        pattern = self.float_pattern if is_float else self.integer_pattern
        if not pattern.fullmatch(text):
            raise create_invalid_number_error(f"Invalid {kind} literal: {text}",
                                              line, column, self._line_text(line))

        clean = text.replace("_", "")
        if is_float:
            self._add_token(TokenType.FLOAT, text, line, column, float(clean))
        else:
            self._add_token(TokenType.INTEGER, text, line, column, int(clean))

    def _scan_exponent(self, line: int, column: int):
        lookahead = self.pos + 1
        if lookahead < len(self.source) and self.source[lookahead] in "+-":
            lookahead += 1

        if lookahead < len(self.source) and _is_digit(self.source[lookahead]):
            self._advance_by(lookahead - self.pos)
            self._consume_digits()
            return

        self._advance_by(lookahead - self.pos)
        if self._current() == "_":
            self._consume_digits()
            raise create_invalid_number_error("Invalid underscore in exponent",
                                              line, column, self._line_text(line))
        raise create_invalid_number_error("Invalid exponent: must start with a digit",
                                          line, column, self._line_text(line))

    def _scan_prefixed_integer(self, start: int, line: int, column: int):
        self._advance()
        prefix = self._current().lower()
        self._advance()
        while not self._is_at_end() and (self._current().isalnum() or self._current() == "_"):
            self._advance()

        base, token_type, name = NUMBER_BASES[prefix]
        text = self.source[start:self.pos]
        body = text[2:]
        if not body.replace("_", ""):
            if prefix == "o":
                message = "Invalid octal literal: no digits after '0o'"
            else:
                message = f"Invalid {name} literal: {text}"
            raise create_invalid_number_error(message, line, column, self._line_text(line))
        if not self.prefixed_patterns[prefix].fullmatch(body):
            raise create_invalid_number_error(f"Invalid {name} literal: {text}",
                                              line, column, self._line_text(line))

        self._add_token(token_type, text, line, column, int(body.replace("_", ""), base))

    def _consume_digits(self):
        while not self._is_at_end() and (_is_digit(self._current()) or self._current() == "_"):
            self._advance()

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _scan_string(self, prefix: str):
        start, line, column = self.pos, self.line, self.column
        flags = prefix.lower()
        if "b" in flags:
            flavor = "bytes"
        elif "f" in flags:
            flavor = "format"
        elif "r" in flags:
            flavor = "raw"
        else:
            flavor = "plain"
        raw = "r" in flags

        self._advance_by(len(prefix))
        quote = self._current()
        triple = self.source.startswith(quote * 3, self.pos)
        delimiter = quote * 3 if triple else quote
        self._advance_by(len(delimiter))

        content_start = self.pos
        content_line, content_column = self.line, self.column
        single_message, triple_message = UNTERMINATED_MESSAGES[flavor]

        while True:
            if self._is_at_end():
                raise create_unterminated_string_error(
                    triple_message if triple else single_message,
                    line, column, self._line_text(line))

            char = self._current()
            if char == "\\":
                self._advance()
                if not self._is_at_end():
                    if self._current() == "\r" and self._peek() == "\n":
                        self._advance()
                    self._advance()
                continue
            if triple:
                if self.source.startswith(delimiter, self.pos):
                    break
            else:
                if char == quote:
                    break
                if char in "\r\n":
                    message = single_message
                    if flavor == "plain":
                        message = "Unterminated string literal: newline in string"
                    raise create_unterminated_string_error(
                        message, line, column, self._line_text(line), multiline_hint=True)
            self._advance()

        content = self.source[content_start:self.pos]
        self._advance_by(len(delimiter))
        lexeme = self.source[start:self.pos]

        if flavor == "bytes":
            value = self._decode_bytes(content, raw, content_line, content_column)
            self._add_token(TokenType.BYTES, lexeme, line, column, value)
        elif flavor == "format":
            self._check_fstring_braces(content, line, column)
            self._add_token(TokenType.FORMAT_STRING, lexeme, line, column, content)
        elif flavor == "raw":
            self._add_token(TokenType.RAW_STRING, lexeme, line, column, content)
        else:
            value = self._decode(content, False, content_line, content_column)
            self._add_token(TokenType.STRING, lexeme, line, column, value)

    def _decode(self, content: str, bytes_mode: bool, line: int, column: int) -> str:
        try:
            return decode_escapes(content, bytes_mode=bytes_mode)
        except EscapeError as error:
            error_line, error_column = offset_position(content, error.offset, line, column)
            raise create_invalid_escape_error(error.message, error_line, error_column,
                                              self._line_text(error_line)) from error

    def _decode_bytes(self, content: str, raw: bool, line: int, column: int) -> bytes:
        for offset, char in enumerate(content):
            if ord(char) > 127:
                error_line, error_column = offset_position(content, offset, line, column)
                raise LexerError("Non-ASCII character in bytes literal", error_line, error_column,
                                 code="L010", snippet=self._line_text(error_line),
                                 suggestion="Use a \\x escape for byte values above 127")
        text = content if raw else self._decode(content, True, line, column)
        return text.encode("latin-1")

    def _check_fstring_braces(self, content: str, line: int, column: int):
        """
        Check that replacement fields in an f-string payload are balanced.

        Quoted strings inside a field expression are skipped. Once the top
        field reaches its format spec, quotes are plain text (`{v:'>10}`).
        """
        depth = 0
        nesting = 0
        in_spec = False
        i = 0
        while i < len(content):
            char = content[i]
            if depth > 0 and char in QUOTES and not (in_spec and depth == 1):
                closing = content.find(char, i + 1)
                i = len(content) if closing == -1 else closing + 1
                continue
            if char == "{":
                if depth == 0 and content.startswith("{{", i):
                    i += 2
                    continue
                depth += 1
            elif char == "}":
                if depth == 0:
                    if content.startswith("}}", i):
                        i += 2
                        continue
                    raise LexerError("Single '}' is not allowed in f-string", line, column,
                                     code="L008", snippet=self._line_text(line),
                                     suggestion="Use '}}' for a literal brace")
                depth -= 1
                if depth == 0:
                    nesting, in_spec = 0, False
            elif depth == 1 and not in_spec:
                if char in "([":
                    nesting += 1
                elif char in ")]":
                    nesting -= 1
                elif char == ":" and nesting == 0:
                    in_spec = True
            i += 1

        if depth > 0:
            raise LexerError("Unterminated expression in f-string: missing '}'", line, column,
                             code="L008", snippet=self._line_text(line),
                             suggestion="Close the replacement field with '}'")

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _add_token(self, token_type: TokenType, lexeme: str, line: int, column: int, value=None):
        self.tokens.append(Token(token_type, lexeme, line, column, value))

    def _skip_comment(self):
        while not self._is_at_end() and self._current() not in "\r\n":
            self._advance()

    def _consume_newline(self):
        if self._current() == "\r" and self._peek() == "\n":
            self._advance()
        self._advance()

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _current(self) -> str:
        if self.pos >= len(self.source):
            return "\0"
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str:
        """Peek at character at current position + offset."""
        peek_pos = self.pos + offset
        if peek_pos >= len(self.source):
            return "\0"
        return self.source[peek_pos]

    def _advance(self) -> str:
        """Advance position and return the consumed character."""
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n" or (char == "\r" and self._current() != "\n"):
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _advance_by(self, count: int):
        for _ in range(count):
            self._advance()

    def _line_text(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1]
        return None


def offset_position(text: str, offset: int, line: int, column: int) -> Tuple[int, int]:
    """Translate an offset inside a literal payload to a source position."""
    for char in text[:offset]:
        if char == "\n":
            line += 1
            column = 1
        else:
            column += 1
    return line, column


def tokenize(source: str, config: Optional[LexerConfig] = None) -> Tuple[List[Token], List[LexerError]]:
    """
    Tokenize source code.

    Returns:
        (tokens, errors). The token list always ends with EOF, even when
        errors were found.
    """
    lexer = Lexer(source, config)
    tokens = lexer.tokenize()
    return tokens, lexer.errors
