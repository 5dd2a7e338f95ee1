"""
Token definitions for the Cheetah lexer.

This module defines every token type the lexer can produce:
- Keywords (all reserved words; `match` and `case` are soft and lex as identifiers)
- Literals (integers in four bases, floats, the four string flavors)
- Operators and delimiters, including compound forms like `**=` and `:=`
- Layout tokens (INDENT, DEDENT, NEWLINE) and the EOF / INVALID sentinels

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Dict


class TokenType(Enum):
    """
    Enumeration of all token types in Cheetah.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Layout and Special Tokens
    # ========================================================================
    EOF = auto()                    # End of file
    NEWLINE = auto()                # End of a logical line
    INDENT = auto()                 # Indentation increase
    DEDENT = auto()                 # Indentation decrease
    INVALID = auto()                # Lexer error occupying a source span

    # ========================================================================
    # Literals
    # ========================================================================

    # Numeric literals
    INTEGER = auto()                # 42, 1_000_000
    FLOAT = auto()                  # 3.14, .5, 1e-4
    BINARY = auto()                 # 0b1010
    OCTAL = auto()                  # 0o52
    HEXADECIMAL = auto()            # 0x2A

    # String literals
    STRING = auto()                 # "hello", '''doc'''
    RAW_STRING = auto()             # r"\d+"
    FORMAT_STRING = auto()          # f"{name}!"
    BYTES = auto()                  # b"\x00"

    # ========================================================================
    # Identifiers and Keywords
    # ========================================================================
    IDENTIFIER = auto()             # variable_name

    # Definition keywords
    DEF = auto()                    # def
    CLASS = auto()                  # class
    LAMBDA = auto()                 # lambda
    RETURN = auto()                 # return
    YIELD = auto()                  # yield
    ASYNC = auto()                  # async
    AWAIT = auto()                  # await

    # Control flow keywords
    IF = auto()                     # if
    ELIF = auto()                   # elif
    ELSE = auto()                   # else
    WHILE = auto()                  # while
    FOR = auto()                    # for
    IN = auto()                     # in
    BREAK = auto()                  # break
    CONTINUE = auto()               # continue
    PASS = auto()                   # pass

    # Exception keywords
    TRY = auto()                    # try
    EXCEPT = auto()                 # except
    FINALLY = auto()                # finally
    RAISE = auto()                  # raise
    ASSERT = auto()                 # assert
    WITH = auto()                   # with

    # Module and scope keywords
    IMPORT = auto()                 # import
    FROM = auto()                   # from
    AS = auto()                     # as
    GLOBAL = auto()                 # global
    NONLOCAL = auto()               # nonlocal
    DEL = auto()                    # del

    # Constant keywords
    TRUE = auto()                   # True
    FALSE = auto()                  # False
    NONE = auto()                   # None

    # Logical keywords
    AND = auto()                    # and
    OR = auto()                     # or
    NOT = auto()                    # not
    IS = auto()                     # is

    # ========================================================================
    # Operators
    # ========================================================================

    # Arithmetic operators
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    FLOOR_DIVIDE = auto()           # //
    MODULO = auto()                 # %
    POWER = auto()                  # **
    AT = auto()                     # @ (decorators and matrix multiply)

    # Assignment operators
    ASSIGN = auto()                 # =
    PLUS_ASSIGN = auto()            # +=
    MINUS_ASSIGN = auto()           # -=
    MULTIPLY_ASSIGN = auto()        # *=
    DIVIDE_ASSIGN = auto()          # /=
    FLOOR_DIVIDE_ASSIGN = auto()    # //=
    MODULO_ASSIGN = auto()          # %=
    POWER_ASSIGN = auto()           # **=
    MATMUL_ASSIGN = auto()          # @=
    BIT_AND_ASSIGN = auto()         # &=
    BIT_OR_ASSIGN = auto()          # |=
    BIT_XOR_ASSIGN = auto()         # ^=
    LEFT_SHIFT_ASSIGN = auto()      # <<=
    RIGHT_SHIFT_ASSIGN = auto()     # >>=
    WALRUS = auto()                 # :=

    # Comparison operators
    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    LESS_EQUAL = auto()             # <=
    GREATER_EQUAL = auto()          # >=

    # Bitwise operators
    BIT_AND = auto()                # &
    BIT_OR = auto()                 # |
    BIT_XOR = auto()                # ^
    BIT_NOT = auto()                # ~
    LEFT_SHIFT = auto()             # <<
    RIGHT_SHIFT = auto()            # >>

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }

    COMMA = auto()                  # ,
    DOT = auto()                    # .
    COLON = auto()                  # :
    SEMICOLON = auto()              # ;
    ARROW = auto()                  # ->
    ELLIPSIS = auto()               # ...


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    `value` carries the payload: the name for identifiers, the decoded number
    for numeric literals, the decoded text (or raw payload for f-strings) for
    strings, bytes for bytes literals and the message for INVALID tokens.
    """
    type: TokenType
    lexeme: str
    line: int
    column: int
    value: Any = None

    def __str__(self) -> str:
        if self.value is not None and self.type is not TokenType.INVALID:
            return f"{self.type.name}({self.value!r})@{self.line}:{self.column}"
        return f"{self.type.name}@{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, {self.line}, {self.column})"

    @property
    def is_literal(self) -> bool:
        """Check if this token is a literal value."""
        return self.type in LITERAL_TYPES

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORD_TYPES

    @property
    def is_operator(self) -> bool:
        """Check if this token is an operator or delimiter."""
        return self.type in OPERATOR_TYPES

    @property
    def is_layout(self) -> bool:
        return self.type in LAYOUT_TYPES

    @property
    def is_identifier(self) -> bool:
        return self.type is TokenType.IDENTIFIER

    def describe(self) -> str:
        """Human readable description used in diagnostics."""
        if self.type is TokenType.EOF:
            return "end of file"
        if self.type is TokenType.NEWLINE:
            return "newline"
        if self.type is TokenType.INDENT:
            return "indent"
        if self.type is TokenType.DEDENT:
            return "dedent"
        if self.type is TokenType.INVALID:
            return f"invalid token ({self.value})"
        return f"'{self.lexeme}'"


# Keyword mapping
KEYWORDS: Dict[str, TokenType] = {
    "def": TokenType.DEF,
    "class": TokenType.CLASS,
    "lambda": TokenType.LAMBDA,
    "return": TokenType.RETURN,
    "yield": TokenType.YIELD,
    "async": TokenType.ASYNC,
    "await": TokenType.AWAIT,
    "if": TokenType.IF,
    "elif": TokenType.ELIF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "in": TokenType.IN,
    "break": TokenType.BREAK,
    "continue": TokenType.CONTINUE,
    "pass": TokenType.PASS,
    "try": TokenType.TRY,
    "except": TokenType.EXCEPT,
    "finally": TokenType.FINALLY,
    "raise": TokenType.RAISE,
    "assert": TokenType.ASSERT,
    "with": TokenType.WITH,
    "import": TokenType.IMPORT,
    "from": TokenType.FROM,
    "as": TokenType.AS,
    "global": TokenType.GLOBAL,
    "nonlocal": TokenType.NONLOCAL,
    "del": TokenType.DEL,
    "True": TokenType.TRUE,
    "False": TokenType.FALSE,
    "None": TokenType.NONE,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "is": TokenType.IS,
}

# Operator mapping (longest match is resolved by the lexer)
OPERATORS: Dict[str, TokenType] = {
    # Three-character operators
    "**=": TokenType.POWER_ASSIGN,
    "//=": TokenType.FLOOR_DIVIDE_ASSIGN,
    "<<=": TokenType.LEFT_SHIFT_ASSIGN,
    ">>=": TokenType.RIGHT_SHIFT_ASSIGN,
    "...": TokenType.ELLIPSIS,

    # Two-character operators
    "**": TokenType.POWER,
    "//": TokenType.FLOOR_DIVIDE,
    "<<": TokenType.LEFT_SHIFT,
    ">>": TokenType.RIGHT_SHIFT,
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "+=": TokenType.PLUS_ASSIGN,
    "-=": TokenType.MINUS_ASSIGN,
    "*=": TokenType.MULTIPLY_ASSIGN,
    "/=": TokenType.DIVIDE_ASSIGN,
    "%=": TokenType.MODULO_ASSIGN,
    "@=": TokenType.MATMUL_ASSIGN,
    "&=": TokenType.BIT_AND_ASSIGN,
    "|=": TokenType.BIT_OR_ASSIGN,
    "^=": TokenType.BIT_XOR_ASSIGN,
    "->": TokenType.ARROW,
    ":=": TokenType.WALRUS,

    # Single-character operators
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "@": TokenType.AT,
    "=": TokenType.ASSIGN,
    "<": TokenType.LESS_THAN,
    ">": TokenType.GREATER_THAN,
    "&": TokenType.BIT_AND,
    "|": TokenType.BIT_OR,
    "^": TokenType.BIT_XOR,
    "~": TokenType.BIT_NOT,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
}

# Reverse lookup used when rendering token types in diagnostics
TOKEN_SPELLINGS: Dict[TokenType, str] = {
    **{token_type: text for text, token_type in KEYWORDS.items()},
    **{token_type: text for text, token_type in OPERATORS.items()},
}

LAYOUT_TYPES = frozenset({
    TokenType.NEWLINE, TokenType.INDENT, TokenType.DEDENT, TokenType.EOF,
})

NUMBER_TYPES = frozenset({
    TokenType.INTEGER, TokenType.FLOAT, TokenType.BINARY,
    TokenType.OCTAL, TokenType.HEXADECIMAL,
})

STRING_TYPES = frozenset({
    TokenType.STRING, TokenType.RAW_STRING, TokenType.FORMAT_STRING, TokenType.BYTES,
})

LITERAL_TYPES = NUMBER_TYPES | STRING_TYPES | {TokenType.TRUE, TokenType.FALSE, TokenType.NONE}

KEYWORD_TYPES = frozenset(KEYWORDS.values())

OPERATOR_TYPES = frozenset(OPERATORS.values())

# Bracket pairs tracked for implicit line joining
OPENING_BRACKETS = {"(": ")", "[": "]", "{": "}"}
CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}


def spelling(token_type: TokenType) -> str:
    """Return the source spelling of a token type, or its name for literal kinds."""
    return TOKEN_SPELLINGS.get(token_type, token_type.name.lower())
