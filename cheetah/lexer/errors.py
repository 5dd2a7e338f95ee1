"""
Error handling for the Cheetah lexer.

Provides diagnostics with source positions, optional source snippets and
fix suggestions. The same Diagnostic record backs parser errors, so a driver
can print lexer and parser problems uniformly.

Author: xwest
"""

from typing import Optional, List, Union
from dataclasses import dataclass


@dataclass
class Diagnostic:
    """Base record for diagnostics (errors and warnings)."""
    message: str
    line: int
    column: int
    severity: str = "error"  # "error", "warning"
    code: Optional[str] = None
    snippet: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        result = f"Line {self.line}, column {self.column}: {self.message}"
        if self.suggestion:
            result += f" - Suggestion: {self.suggestion}"
        return result


class LexerError(Exception):
    """
    Exception raised inside the lexer when a lexeme cannot be recognized.

    The tokenize loop catches it, records it and keeps going, so callers
    normally see instances of this class in the error list rather than
    as raised exceptions.
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        code: Optional[str] = None,
        snippet: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
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
    def snippet(self) -> Optional[str]:
        return self.diagnostic.snippet

    @property
    def suggestion(self) -> Optional[str]:
        return self.diagnostic.suggestion

    def __str__(self) -> str:
        return str(self.diagnostic)


class ErrorRecovery:
    """Suggestion helpers shared by the lexer and the parser."""

    @staticmethod
    def suggest_keyword_corrections(word: str) -> List[str]:
        """Suggest keywords close to a (probably misspelled) word using edit distance."""
        from .tokens import KEYWORDS

        if len(word) < 2:
            return []
        candidates = []
        for keyword in KEYWORDS:
            distance = ErrorRecovery._edit_distance(word, keyword)
            if 0 < distance <= (1 if len(word) <= 3 else 2):
                candidates.append((distance, keyword))
        return [keyword for _, keyword in sorted(candidates)][:3]

    @staticmethod
    def _edit_distance(s1: str, s2: str) -> int:
        """Calculate Levenshtein distance between two strings."""
        if len(s1) < len(s2):
            return ErrorRecovery._edit_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]


# Error codes for categorization
ERROR_CODES = {
    "L001": "Unexpected character",
    "L002": "Unterminated string literal",
    "L003": "Invalid numeric literal",
    "L004": "Invalid escape sequence",
    "L005": "Inconsistent indentation",
    "L006": "Tab in indentation",
    "L007": "Invalid line continuation",
    "L008": "Unbalanced f-string expression",
    "L009": "Semicolon not allowed",
    "L010": "Non-ASCII character in bytes literal",
}


def create_unexpected_character_error(char: str, line: int, column: int,
                                      snippet: Optional[str] = None) -> LexerError:
    """Create an error for a character that starts no token."""
    suggestion = None
    if char == "!":
        suggestion = "Use 'not' instead of ! for boolean negation"
    elif char == "$" or char == "?":
        suggestion = f"'{char}' has no meaning outside string literals"
    elif not char.isprintable():
        return LexerError(
            message=f"Unexpected character: U+{ord(char):04X}",
            line=line, column=column, code="L001", snippet=snippet,
        )
    return LexerError(
        message=f"Unexpected character: {char}",
        line=line,
        column=column,
        code="L001",
        snippet=snippet,
        suggestion=suggestion,
    )


def create_unterminated_string_error(message: str, line: int, column: int,
                                     snippet: Optional[str] = None,
                                     multiline_hint: bool = False) -> LexerError:
    """Create an error for an unterminated string literal of any flavor."""
    suggestion = "Add closing quote"
    if multiline_hint:
        suggestion = "Add closing quote or use triple quotes for multi-line strings"
    return LexerError(message, line, column, code="L002", snippet=snippet,
                      suggestion=suggestion)


def create_invalid_number_error(message: str, line: int, column: int,
                                snippet: Optional[str] = None) -> LexerError:
    """Create an error for a malformed numeric literal."""
    return LexerError(message, line, column, code="L003", snippet=snippet)


def create_invalid_escape_error(message: str, line: int, column: int,
                                snippet: Optional[str] = None) -> LexerError:
    """Create an error for a bad escape sequence inside a string literal."""
    return LexerError(message, line, column, code="L004", snippet=snippet,
                      suggestion="Use a raw string if the backslash is meant literally")


def format_with_source(error: Union[Diagnostic, Exception], source: str,
                       context_lines: int = 2) -> str:
    """
    Render a diagnostic together with the surrounding source.

    Shows up to `context_lines` lines on either side of the offending line,
    a line-number gutter and a caret under the reported column.
    """
    diagnostic = error if isinstance(error, Diagnostic) else getattr(error, "diagnostic", None)
    if diagnostic is None:
        return str(error)

    lines = source.splitlines()
    header = f"{diagnostic.severity}: {diagnostic}"
    if not lines or diagnostic.line < 1:
        return header

    index = min(diagnostic.line, len(lines)) - 1
    first = max(0, index - context_lines)
    last = min(len(lines) - 1, index + context_lines)
    width = len(str(last + 1))

    rendered = [header]
    for number in range(first, last + 1):
        rendered.append(f"{number + 1:>{width}} | {lines[number]}")
        if number == index:
            caret_column = max(diagnostic.column, 1)
            rendered.append(f"{' ' * width} | {' ' * (caret_column - 1)}^")
    return "\n".join(rendered)
