"""
Cheetah Lexer Package

Implements the indentation-aware lexical analyzer for the Cheetah language,
a Python dialect.

Key Features:
- INDENT/DEDENT synthesis from an indent stack
- Implicit line joining inside (), [] and {}, explicit joining with a backslash
- Plain, raw, formatted and bytes strings, single- and triple-quoted
- Binary, octal, hex, decimal and float literals with digit separators
- Error recovery: bad lexemes become INVALID tokens and lexing continues

Author: xwest
"""

from .tokens import Token, TokenType, KEYWORDS, OPERATORS
from .config import LexerConfig
from .lexer import Lexer, tokenize
from .errors import Diagnostic, LexerError, format_with_source

__all__ = [
    "Lexer",
    "tokenize",
    "Token",
    "TokenType",
    "KEYWORDS",
    "OPERATORS",
    "LexerConfig",
    "Diagnostic",
    "LexerError",
    "format_with_source",
]
