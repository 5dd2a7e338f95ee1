"""
Abstract Syntax Tree node definitions for Cheetah.

The node set mirrors Python's `ast` module closely: a Module holds Statements,
Statements hold Expressions, and a handful of auxiliary records (Parameter,
Comprehension, ExceptHandler, Alias, Keyword, WithItem, MatchCase) glue them
together. Every node carries the line and column of its first token.

Nodes are dataclasses so equality is structural. The only mutation the parser
performs after construction is stamping Store/Del context on assignment
targets (see set_context).

Author: xwest
"""

from dataclasses import dataclass, field, fields
from enum import Enum
import typing
from typing import Any, Iterator, Optional, Union


class ExprContext(Enum):
    """How a name-bearing expression is used."""
    LOAD = "Load"
    STORE = "Store"
    DEL = "Del"


class Operator(Enum):
    """Binary operators."""
    ADD = "Add"
    SUB = "Sub"
    MULT = "Mult"
    MAT_MULT = "MatMult"
    DIV = "Div"
    FLOOR_DIV = "FloorDiv"
    MOD = "Mod"
    POW = "Pow"
    LSHIFT = "LShift"
    RSHIFT = "RShift"
    BIT_OR = "BitOr"
    BIT_XOR = "BitXor"
    BIT_AND = "BitAnd"


class UnaryOperator(Enum):
    INVERT = "Invert"
    NOT = "Not"
    UADD = "UAdd"
    USUB = "USub"


class BoolOperator(Enum):
    AND = "And"
    OR = "Or"


class CmpOperator(Enum):
    EQ = "Eq"
    NOT_EQ = "NotEq"
    LT = "Lt"
    LT_E = "LtE"
    GT = "Gt"
    GT_E = "GtE"
    IS = "Is"
    IS_NOT = "IsNot"
    IN = "In"
    NOT_IN = "NotIn"


class ParameterKind(Enum):
    """Where a parameter sits relative to the `/`, `*` and `**` markers."""
    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"


POSITION_FIELDS = ("line", "column")


class ASTNode:
    """Base class for all AST nodes."""

    @property
    def node_type(self) -> str:
        return type(self).__name__

    def accept(self, visitor: "ASTVisitor") -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def children(self) -> typing.List["ASTNode"]:
        """Get all direct child nodes."""
        return list(iter_child_nodes(self))

    def iter_fields(self) -> Iterator:
        """Yield (name, value) for every field except the source position."""
        for node_field in fields(self):
            if node_field.name not in POSITION_FIELDS:
                yield node_field.name, getattr(self, node_field.name)


class Statement(ASTNode):
    """Base class for statements."""


class Expression(ASTNode):
    """Base class for expressions."""


# ============================================================================
# Module
# ============================================================================

@dataclass
class Module(ASTNode):
    """Root node: the ordered statements of one source unit."""
    body: typing.List[Statement] = field(default_factory=list)
    line: int = 1
    column: int = 1


# ============================================================================
# Auxiliary records
# ============================================================================

@dataclass
class Parameter(ASTNode):
    """Function or lambda parameter."""
    name: str
    annotation: Optional[Expression] = None
    default: Optional[Expression] = None
    is_vararg: bool = False
    is_kwarg: bool = False
    kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD
    line: int = 0
    column: int = 0


@dataclass
class Keyword(ASTNode):
    """Keyword argument in a call or class header; `arg` is None for **mapping."""
    arg: Optional[str]
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class Comprehension(ASTNode):
    """One `for target in iter [if cond]*` clause."""
    target: Expression
    iter: Expression
    ifs: typing.List[Expression] = field(default_factory=list)
    is_async: bool = False
    line: int = 0
    column: int = 0


@dataclass
class ExceptHandler(ASTNode):
    type: Optional[Expression] = None
    name: Optional[str] = None
    body: typing.List[Statement] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Alias(ASTNode):
    """Imported name, optionally renamed with `as`."""
    name: str
    asname: Optional[str] = None
    line: int = 0
    column: int = 0


@dataclass
class WithItem(ASTNode):
    context_expr: Expression
    optional_vars: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class MatchCase(ASTNode):
    """`case pattern [if guard]: body` inside a match statement."""
    pattern: Expression
    guard: Optional[Expression] = None
    body: typing.List[Statement] = field(default_factory=list)
    line: int = 0
    column: int = 0


# ============================================================================
# Statements
# ============================================================================

@dataclass
class FunctionDef(Statement):
    name: str
    params: typing.List[Parameter] = field(default_factory=list)
    body: typing.List[Statement] = field(default_factory=list)
    decorators: typing.List[Expression] = field(default_factory=list)
    returns: Optional[Expression] = None
    is_async: bool = False
    line: int = 0
    column: int = 0


@dataclass
class ClassDef(Statement):
    name: str
    bases: typing.List[Expression] = field(default_factory=list)
    keywords: typing.List[Keyword] = field(default_factory=list)
    body: typing.List[Statement] = field(default_factory=list)
    decorators: typing.List[Expression] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Return(Statement):
    value: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class Delete(Statement):
    targets: typing.List[Expression] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Assign(Statement):
    targets: typing.List[Expression]
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class AugAssign(Statement):
    target: Expression
    op: Operator
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class AnnAssign(Statement):
    target: Expression
    annotation: Expression
    value: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class For(Statement):
    target: Expression
    iter: Expression
    body: typing.List[Statement] = field(default_factory=list)
    orelse: typing.List[Statement] = field(default_factory=list)
    is_async: bool = False
    line: int = 0
    column: int = 0


@dataclass
class While(Statement):
    test: Expression
    body: typing.List[Statement] = field(default_factory=list)
    orelse: typing.List[Statement] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class If(Statement):
    test: Expression
    body: typing.List[Statement] = field(default_factory=list)
    orelse: typing.List[Statement] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class With(Statement):
    items: typing.List[WithItem] = field(default_factory=list)
    body: typing.List[Statement] = field(default_factory=list)
    is_async: bool = False
    line: int = 0
    column: int = 0


@dataclass
class Raise(Statement):
    exc: Optional[Expression] = None
    cause: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class Try(Statement):
    body: typing.List[Statement] = field(default_factory=list)
    handlers: typing.List[ExceptHandler] = field(default_factory=list)
    orelse: typing.List[Statement] = field(default_factory=list)
    finalbody: typing.List[Statement] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Assert(Statement):
    test: Expression
    msg: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class Import(Statement):
    names: typing.List[Alias] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class ImportFrom(Statement):
    module: Optional[str]
    names: typing.List[Alias] = field(default_factory=list)
    level: int = 0
    line: int = 0
    column: int = 0


@dataclass
class Global(Statement):
    names: typing.List[str] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Nonlocal(Statement):
    names: typing.List[str] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Expr(Statement):
    """Expression statement."""
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class Pass(Statement):
    line: int = 0
    column: int = 0


@dataclass
class Break(Statement):
    line: int = 0
    column: int = 0


@dataclass
class Continue(Statement):
    line: int = 0
    column: int = 0


@dataclass
class Match(Statement):
    subject: Expression
    cases: typing.List[MatchCase] = field(default_factory=list)
    line: int = 0
    column: int = 0


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class BoolOp(Expression):
    op: BoolOperator
    values: typing.List[Expression]
    line: int = 0
    column: int = 0


@dataclass
class BinOp(Expression):
    left: Expression
    op: Operator
    right: Expression
    line: int = 0
    column: int = 0


@dataclass
class UnaryOp(Expression):
    op: UnaryOperator
    operand: Expression
    line: int = 0
    column: int = 0


@dataclass
class Lambda(Expression):
    params: typing.List[Parameter]
    body: Expression
    line: int = 0
    column: int = 0


@dataclass
class IfExp(Expression):
    test: Expression
    body: Expression
    orelse: Expression
    line: int = 0
    column: int = 0


@dataclass
class Dict(Expression):
    """Dict display; a None key marks a `**mapping` spread."""
    keys: typing.List[Optional[Expression]] = field(default_factory=list)
    values: typing.List[Expression] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Set(Expression):
    elts: typing.List[Expression] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class ListComp(Expression):
    elt: Expression
    generators: typing.List[Comprehension]
    line: int = 0
    column: int = 0


@dataclass
class SetComp(Expression):
    elt: Expression
    generators: typing.List[Comprehension]
    line: int = 0
    column: int = 0


@dataclass
class DictComp(Expression):
    key: Expression
    value: Expression
    generators: typing.List[Comprehension]
    line: int = 0
    column: int = 0


@dataclass
class GeneratorExp(Expression):
    elt: Expression
    generators: typing.List[Comprehension]
    line: int = 0
    column: int = 0


@dataclass
class Await(Expression):
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class Yield(Expression):
    value: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class YieldFrom(Expression):
    value: Expression
    line: int = 0
    column: int = 0


@dataclass
class Compare(Expression):
    left: Expression
    ops: typing.List[CmpOperator]
    comparators: typing.List[Expression]
    line: int = 0
    column: int = 0


@dataclass
class Call(Expression):
    func: Expression
    args: typing.List[Expression] = field(default_factory=list)
    keywords: typing.List[Keyword] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Num(Expression):
    value: Union[int, float]
    line: int = 0
    column: int = 0


@dataclass
class Str(Expression):
    value: str
    line: int = 0
    column: int = 0


@dataclass
class FormattedValue(Expression):
    """A `{value!conversion:format_spec}` replacement field of an f-string."""
    value: Expression
    conversion: Optional[str] = None
    format_spec: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class JoinedStr(Expression):
    values: typing.List[Expression] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class Bytes(Expression):
    value: bytes
    line: int = 0
    column: int = 0


@dataclass
class NameConstant(Expression):
    """True, False or None."""
    value: Optional[bool]
    line: int = 0
    column: int = 0


@dataclass
class Ellipsis(Expression):
    line: int = 0
    column: int = 0


@dataclass
class Attribute(Expression):
    value: Expression
    attr: str
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class Subscript(Expression):
    value: Expression
    slice: Expression
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class Starred(Expression):
    value: Expression
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class Name(Expression):
    id: str
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class List(Expression):
    elts: typing.List[Expression] = field(default_factory=list)
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class Tuple(Expression):
    elts: typing.List[Expression] = field(default_factory=list)
    ctx: ExprContext = ExprContext.LOAD
    line: int = 0
    column: int = 0


@dataclass
class Slice(Expression):
    lower: Optional[Expression] = None
    upper: Optional[Expression] = None
    step: Optional[Expression] = None
    line: int = 0
    column: int = 0


@dataclass
class NamedExpr(Expression):
    """Walrus: `target := value`."""
    target: Expression
    value: Expression
    line: int = 0
    column: int = 0


LITERAL_NODES = (Num, Str, Bytes, NameConstant, JoinedStr, Ellipsis)


# ============================================================================
# Traversal helpers
# ============================================================================

def iter_child_nodes(node: ASTNode) -> Iterator[ASTNode]:
    """Yield the direct child nodes of a node, in field order."""
    for _, value in node.iter_fields():
        if isinstance(value, ASTNode):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, ASTNode):
                    yield item


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield a node and all of its descendants, parents before children."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def set_context(node: Expression, ctx: ExprContext) -> Expression:
    """
    Stamp `ctx` on an assignment or deletion target.

    Recurses through Tuple, List and Starred; for Attribute and Subscript
    only the outer node is relabelled since their inner values are loaded.
    """
    if isinstance(node, (Name, Attribute, Subscript)):
        node.ctx = ctx
    elif isinstance(node, Starred):
        node.ctx = ctx
        set_context(node.value, ctx)
    elif isinstance(node, (Tuple, List)):
        node.ctx = ctx
        for element in node.elts:
            set_context(element, ctx)
    return node


class ASTVisitor:
    """
    Visitor base class.

    `visit` dispatches to `visit_<ClassName>` when defined and falls back to
    `generic_visit`, which visits every child.
    """

    def visit(self, node: ASTNode) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: ASTNode) -> Any:
        for child in iter_child_nodes(node):
            self.visit(child)
        return None


def dump(node: Any) -> str:
    """
    Render a tree as a compact string without source positions.

    Fields holding None or an empty list are left out, which keeps the
    output short enough to compare in tests.
    """
    if isinstance(node, NameConstant):
        return f"NameConstant(value={node.value!r})"
    if isinstance(node, ASTNode):
        parts = []
        for name, value in node.iter_fields():
            if value is None or (isinstance(value, list) and not value):
                continue
            if name.startswith("is_") and not value:
                continue
            if name == "ctx" and value is ExprContext.LOAD:
                continue
            if name == "kind" and value is ParameterKind.POSITIONAL_OR_KEYWORD:
                continue
            parts.append(f"{name}={dump(value)}")
        return f"{type(node).__name__}({', '.join(parts)})"
    if isinstance(node, list):
        return "[" + ", ".join(dump(item) for item in node) + "]"
    if isinstance(node, Enum):
        return node.value
    return repr(node)
