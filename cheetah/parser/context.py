"""
Parser context tags.

The parser keeps a stack of these while descending into constructs. Legality
checks ask whether a tag is anywhere on the stack, not only on top, so a
function nested in a loop (or a loop nested in a function) keeps both visible.
"""

from enum import Enum, auto


class ParserContext(Enum):
    NORMAL = auto()
    FUNCTION = auto()
    LOOP = auto()
    COMPREHENSION = auto()
    MATCH = auto()
