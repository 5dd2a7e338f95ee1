"""
Cheetah Compiler Front End

Lexer and parser for Cheetah, a Python dialect. Source text becomes a token
stream with synthesized INDENT/DEDENT tokens, and tokens become a syntax tree
modelled on Python's `ast` module. Later compiler stages (symbol tables,
type checking, code generation) consume the tree and live elsewhere.

Architecture:
    cheetah/
    ├── lexer/           # Tokenization, indentation and string decoding
    └── parser/          # Syntax analysis, AST nodes and f-string parsing

Author: xwest
License: MIT
"""

__version__ = "0.1.0-alpha"
__author__ = "xwest"
__email__ = "dev@cheetah-lang.org"
__license__ = "MIT"

from .lexer import Lexer, LexerConfig, tokenize
from .parser import Parser, parse, parse_source, parse_expression_source

__all__ = [
    # Core classes
    "Lexer",
    "LexerConfig",
    "Parser",

    # Entry points
    "tokenize",
    "parse",
    "parse_source",
    "parse_expression_source",

    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
