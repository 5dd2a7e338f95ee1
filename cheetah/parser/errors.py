"""
Error handling for the Cheetah parser.

Parse errors come in three kinds: an unexpected token, a syntax rule that
was violated, and running out of input. They share the lexer's Diagnostic
record so they render the same way.

Author: xwest
"""

from enum import Enum
from typing import Optional, List

from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "UnexpectedToken"
    INVALID_SYNTAX = "InvalidSyntax"
    EOF = "EOF"


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Raised inside the statement parsers and caught by the driver, which
    records it and synchronizes to the next statement.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        line: int,
        column: int,
        expected: Optional[str] = None,
        found: Optional[Token] = None,
        code: Optional[str] = None,
        snippet: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.expected = expected
        self.found = found
        self.diagnostic = Diagnostic(
            message=message,
            line=line,
            column=column,
            severity="error",
            code=code,
            snippet=snippet,
            suggestion=suggestion,
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def line(self) -> int:
        return self.diagnostic.line

    @property
    def column(self) -> int:
        return self.diagnostic.column

    @property
    def suggestion(self) -> Optional[str]:
        return self.diagnostic.suggestion

    def __str__(self) -> str:
        return str(self.diagnostic)

    def __repr__(self) -> str:
        return f"ParseError({self.kind.value}, {self.message!r}, {self.line}, {self.column})"


class ParseWarning:
    """
    Represents a parser warning that doesn't stop compilation.
    """

    def __init__(self, message: str, line: int, column: int,
                 suggestion: Optional[str] = None):
        self.diagnostic = Diagnostic(
            message=message,
            line=line,
            column=column,
            severity="warning",
            suggestion=suggestion,
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    def __str__(self) -> str:
        return str(self.diagnostic)


class ParseFailure(Exception):
    """
    Raised by parse() when any error was recorded.

    Carries every error in source order, plus any warnings and, when the
    source went through the lexer in the same call, the lexer errors.
    """

    def __init__(self, errors: List[ParseError], warnings: Optional[List[ParseWarning]] = None,
                 lexer_errors: Optional[list] = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        self.lexer_errors = list(lexer_errors or [])
        super().__init__(self._summary())

    def _summary(self) -> str:
        problems = self.lexer_errors + self.errors
        count = len(problems)
        lines = [f"{count} syntax error{'s' if count != 1 else ''}"]
        lines.extend(str(problem) for problem in problems)
        return "\n".join(lines)

    @property
    def all_errors(self) -> list:
        return self.lexer_errors + self.errors


# Error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Unexpected end of file",
    "P003": "Unclosed delimiter",
    "P004": "Invalid assignment target",
    "P005": "Statement outside of its required context",
    "P006": "Invalid parameter list",
    "P007": "Invalid expression",
    "P008": "Invalid argument list",
    "P009": "Invalid block structure",
    "P010": "Invalid import statement",
    "P011": "Invalid f-string expression",
}

UNCLOSED_MESSAGES = {
    TokenType.RIGHT_PAREN: "Unclosed parenthesis",
    TokenType.RIGHT_BRACKET: "Unclosed bracket",
    TokenType.RIGHT_BRACE: "Unclosed brace",
}


def create_unexpected_token_error(expected: str, found: Token,
                                  suggestion: Optional[str] = None) -> ParseError:
    """Create an error for a token the grammar does not allow here."""
    if found.type is TokenType.EOF:
        return create_unexpected_eof_error(expected, found)
    return ParseError(
        ParseErrorKind.UNEXPECTED_TOKEN,
        message=f"Expected '{expected}', but found {found.describe()}",
        line=found.line,
        column=found.column,
        expected=expected,
        found=found,
        code="P001",
        suggestion=suggestion,
    )


def create_unexpected_eof_error(expected: str, eof_token: Token) -> ParseError:
    """Create an error for input that ended too early."""
    return ParseError(
        ParseErrorKind.EOF,
        message=f"Unexpected end of file, expected {expected}",
        line=eof_token.line,
        column=eof_token.column,
        expected=expected,
        found=eof_token,
        code="P002",
    )


def create_syntax_error(message: str, line: int, column: int, code: str = "P007",
                        suggestion: Optional[str] = None) -> ParseError:
    """Create an error for a violated syntax rule."""
    return ParseError(
        ParseErrorKind.INVALID_SYNTAX,
        message=message,
        line=line,
        column=column,
        code=code,
        suggestion=suggestion,
    )


def create_unclosed_delimiter_error(closing: TokenType, opener: Token) -> ParseError:
    """Create an error for an opening bracket whose partner never arrives."""
    return create_syntax_error(
        UNCLOSED_MESSAGES[closing], opener.line, opener.column, code="P003",
        suggestion=f"Add the matching '{_closing_spelling(closing)}'",
    )


def _closing_spelling(closing: TokenType) -> str:
    return {TokenType.RIGHT_PAREN: ")", TokenType.RIGHT_BRACKET: "]",
            TokenType.RIGHT_BRACE: "}"}[closing]
