"""
Cheetah Parser Package

Implements a recursive descent parser for the Cheetah language. Produces an
abstract syntax tree modelled on Python's `ast` module, with line and column
information on every node.

Key Features:
- One function per precedence level, right-associative `**`
- Chained comparisons, walrus, conditional expressions, comprehensions
- f-string replacement fields parsed by nested parsers
- Context stack for return/yield/break/continue legality
- Error recovery and synchronization at statement boundaries

Author: xwest
"""

from .ast_nodes import *
from .context import ParserContext
from .parser import Parser, parse, parse_source, parse_expression_source
from .errors import ParseError, ParseErrorKind, ParseWarning, ParseFailure

__all__ = [
    # Core parser
    "Parser", "ParserContext",
    "parse", "parse_source", "parse_expression_source",

    # AST nodes
    "ASTNode", "Statement", "Expression", "Module",
    "ExprContext", "Operator", "UnaryOperator", "BoolOperator", "CmpOperator", "ParameterKind",
    "Parameter", "Keyword", "Comprehension", "ExceptHandler", "Alias", "WithItem", "MatchCase",
    "FunctionDef", "ClassDef", "Return", "Delete", "Assign", "AugAssign", "AnnAssign",
    "For", "While", "If", "With", "Raise", "Try", "Assert", "Import", "ImportFrom",
    "Global", "Nonlocal", "Expr", "Pass", "Break", "Continue", "Match",
    "BoolOp", "BinOp", "UnaryOp", "Lambda", "IfExp", "Dict", "Set", "ListComp", "SetComp",
    "DictComp", "GeneratorExp", "Await", "Yield", "YieldFrom", "Compare", "Call", "Num",
    "Str", "FormattedValue", "JoinedStr", "Bytes", "NameConstant", "Ellipsis", "Attribute",
    "Subscript", "Starred", "Name", "List", "Tuple", "Slice", "NamedExpr",
    "ASTVisitor", "iter_child_nodes", "walk", "set_context", "dump",

    # Error handling
    "ParseError", "ParseErrorKind", "ParseWarning", "ParseFailure",
]
