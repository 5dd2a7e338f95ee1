"""
Escape-sequence decoding for string and bytes literals.

Used by the lexer for plain and bytes literals and by the f-string splitter
for the literal segments of formatted strings.
"""

import unicodedata
from typing import Tuple

SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "a": "\a",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

HEX_DIGITS = set("0123456789abcdefABCDEF")
OCTAL_DIGITS = set("01234567")


class EscapeError(ValueError):
    """Raised for a malformed escape; `offset` indexes the backslash in the payload."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.message = message
        self.offset = offset


def decode_escapes(text: str, bytes_mode: bool = False) -> str:
    """
    Decode backslash escapes in a string-literal payload.

    In bytes mode the Unicode escapes (\\u, \\U, \\N) are rejected and \\x
    values stay below 256.
    """
    if "\\" not in text:
        return text

    out = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue

        if i + 1 >= length:
            raise EscapeError("Unterminated escape sequence at end of literal", i)

        decoded, consumed = _decode_one(text, i, bytes_mode)
        out.append(decoded)
        i += consumed

    return "".join(out)


def _decode_one(text: str, start: int, bytes_mode: bool) -> Tuple[str, int]:
    """Decode the escape beginning at text[start] (a backslash)."""
    kind = text[start + 1]

    if kind in SIMPLE_ESCAPES:
        return SIMPLE_ESCAPES[kind], 2

    # Line continuation: drop the newline and the indentation that follows it
    if kind == "\n" or kind == "\r":
        end = start + 2
        if kind == "\r" and end < len(text) and text[end] == "\n":
            end += 1
        while end < len(text) and text[end] in " \t":
            end += 1
        return "", end - start

    if kind == "x":
        digits = text[start + 2:start + 4]
        if len(digits) != 2 or not set(digits) <= HEX_DIGITS:
            raise EscapeError("Invalid hex escape sequence: expected 2 hex digits", start)
        return chr(int(digits, 16)), 4

    if kind in OCTAL_DIGITS:
        end = start + 1
        while end < len(text) and end < start + 4 and text[end] in OCTAL_DIGITS:
            end += 1
        value = int(text[start + 1:end], 8)
        if bytes_mode and value > 0xFF:
            raise EscapeError(f"Octal escape out of range for bytes literal: \\{text[start + 1:end]}", start)
        return chr(value), end - start

    if bytes_mode:
        raise EscapeError(f"Invalid escape sequence in bytes literal: \\{kind}", start)

    if kind == "u":
        if start + 2 < len(text) and text[start + 2] == "{":
            return _decode_braced_unicode(text, start)
        digits = text[start + 2:start + 6]
        if len(digits) != 4 or not set(digits) <= HEX_DIGITS:
            raise EscapeError("Invalid Unicode escape sequence: expected 4 hex digits", start)
        return _code_point(int(digits, 16), start), 6

    if kind == "U":
        digits = text[start + 2:start + 10]
        if len(digits) != 8 or not set(digits) <= HEX_DIGITS:
            raise EscapeError("Invalid Unicode escape sequence: expected 8 hex digits", start)
        return _code_point(int(digits, 16), start), 10

    if kind == "N":
        if start + 2 >= len(text) or text[start + 2] != "{":
            raise EscapeError("Invalid named Unicode escape: expected '{'", start)
        close = text.find("}", start + 3)
        if close == -1:
            raise EscapeError("Unclosed named Unicode escape: missing closing brace", start)
        name = text[start + 3:close]
        try:
            return unicodedata.lookup(name), close + 1 - start
        except KeyError:
            raise EscapeError(f"Unknown Unicode character name: {name}", start) from None

    raise EscapeError(f"Unknown escape sequence: \\{kind}", start)


def _decode_braced_unicode(text: str, start: int) -> Tuple[str, int]:
    close = text.find("}", start + 3)
    if close == -1:
        raise EscapeError("Unclosed Unicode escape sequence: missing closing brace", start)
    digits = text[start + 3:close]
    if not digits:
        raise EscapeError("Empty Unicode escape sequence: \\u{}", start)
    if len(digits) > 6 or not set(digits) <= HEX_DIGITS:
        raise EscapeError("Invalid Unicode escape sequence: expected 1 to 6 hex digits", start)
    return _code_point(int(digits, 16), start), close + 1 - start


def _code_point(value: int, start: int) -> str:
    if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        raise EscapeError(f"Invalid Unicode code point: U+{value:X}", start)
    return chr(value)
