"""
Lexer configuration.

Author: xwest
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class LexerConfig:
    """
    Knobs controlling how the lexer measures indentation and which
    lexical constructs it reports as diagnostics.
    """
    tab_width: int = 4
    enforce_indent_consistency: bool = True
    standard_indent_size: int = 4
    allow_trailing_semicolon: bool = True
    allow_tabs_in_indentation: bool = False
    # When set, a line-continuation backslash must be followed directly by
    # the newline; when clear, trailing blanks and a comment are tolerated.
    strict_line_joining: bool = True

    def __post_init__(self):
        if self.tab_width < 1:
            raise ValueError(f"tab_width must be at least 1, got {self.tab_width}")
        if self.standard_indent_size < 1:
            raise ValueError(
                f"standard_indent_size must be at least 1, got {self.standard_indent_size}"
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "LexerConfig":
        """Build a config from a plain mapping such as a driver's settings section."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown lexer option(s): {', '.join(unknown)}")
        return cls(**dict(options))


DEFAULT_CONFIG = LexerConfig()
