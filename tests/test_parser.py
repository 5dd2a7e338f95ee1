"""
Test suite for the Cheetah parser.

Tests cover:
- Statement productions and the trees they build
- Expression forms, displays and comprehensions
- f-string replacement fields
- Context legality (return, yield, await, break, continue)
- Syntax errors, recovery and warnings

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from cheetah.lexer import tokenize
from cheetah.parser import (
    Parser, ParserContext, ParseError, ParseErrorKind, ParseFailure,
    parse, parse_source, parse_expression_source, dump,
    ASTVisitor, ExprContext, Operator, BoolOperator, CmpOperator, ParameterKind,
    Module, FunctionDef, ClassDef, Return, Delete, Assign, AugAssign, AnnAssign, For, While,
    If, With, Raise, Try, Assert, Import, ImportFrom, Global, Nonlocal, Expr, Pass, Break,
    Continue, Match, BoolOp, BinOp, UnaryOp, Lambda, IfExp, Dict, Set, ListComp, SetComp,
    DictComp, GeneratorExp, Await, Yield, YieldFrom, Compare, Call, Num, Str, Bytes,
    FormattedValue, JoinedStr, NameConstant, Ellipsis, Attribute, Subscript, Starred, Name,
    List, Tuple, Slice, NamedExpr,
)


class ParserTestCase(unittest.TestCase):
    """Shared helpers for parser tests."""

    def _parse(self, source: str) -> Module:
        """Helper to parse source that must be valid."""
        try:
            return parse_source(source)
        except ParseFailure as failure:
            self.fail(f"Unexpected parse failure for {source!r}:\n{failure}")

    def _statement(self, source: str):
        module = self._parse(source)
        self.assertEqual(len(module.body), 1)
        return module.body[0]

    def _expression(self, source: str):
        statement = self._statement(source)
        self.assertIsInstance(statement, Expr)
        return statement.value

    def _errors(self, source: str):
        """Helper returning the parse errors of source that must be invalid."""
        with self.assertRaises(ParseFailure) as caught:
            parse_source(source)
        return caught.exception.errors

    def _single_error(self, source: str) -> ParseError:
        errors = self._errors(source)
        self.assertEqual(len(errors), 1, [str(error) for error in errors])
        return errors[0]


class TestScenarios(ParserTestCase):
    """End-to-end examples of source and the tree it produces."""

    def test_if_block_then_statement(self):
        module = self._parse("if True:\n    x = 1\n    y = 2\nz = 3\n")
        self.assertEqual(len(module.body), 2)

        if_statement = module.body[0]
        self.assertIsInstance(if_statement, If)
        self.assertEqual(if_statement.test, NameConstant(True, line=1, column=4))
        self.assertEqual(len(if_statement.body), 2)
        self.assertEqual(if_statement.orelse, [])
        self.assertIsInstance(module.body[1], Assign)

    def test_call_with_two_arguments(self):
        call = self._expression("foo(a, b)\n")
        self.assertIsInstance(call, Call)
        self.assertEqual(call.func.id, "foo")
        self.assertEqual([arg.id for arg in call.args], ["a", "b"])
        self.assertEqual(call.keywords, [])

    def test_triple_quoted_string(self):
        node = self._expression('"""line1\nline2"""\n')
        self.assertEqual(node, Str("line1\nline2", line=1, column=1))

    def test_chained_comparison(self):
        node = self._expression("a < b not in c\n")
        self.assertIsInstance(node, Compare)
        self.assertEqual(node.left.id, "a")
        self.assertEqual(node.ops, [CmpOperator.LT, CmpOperator.NOT_IN])
        self.assertEqual([c.id for c in node.comparators], ["b", "c"])

    def test_walrus_in_condition(self):
        statement = self._statement("if (n := 10) > 5:\n    pass\n")
        test = statement.test
        self.assertIsInstance(test, Compare)
        self.assertIsInstance(test.left, NamedExpr)
        self.assertEqual(test.left.target.id, "n")
        self.assertEqual(test.left.target.ctx, ExprContext.STORE)
        self.assertEqual(test.left.value, Num(10, line=1, column=10))
        self.assertEqual(test.ops, [CmpOperator.GT])

    def test_error_then_recovery(self):
        """A broken statement is reported and parsing resumes on the next line."""
        source = "x = 1 +\ny = 2\n"
        tokens, lexer_errors = tokenize(source)
        self.assertEqual(lexer_errors, [])

        parser = Parser(tokens, source)
        with self.assertRaises(ParseFailure) as caught:
            parser.parse()

        errors = caught.exception.errors
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].line, 1)
        self.assertIn("expected 'expression'", errors[0].message.lower())
        self.assertTrue(parser._is_at_end())


class TestDefinitions(ParserTestCase):
    """def, lambda, class and decorators."""

    def test_parameter_kinds(self):
        function = self._statement("def f(a, /, b, *args, c, d=1, **kw) -> int:\n    return a\n")
        self.assertIsInstance(function, FunctionDef)
        kinds = [(p.name, p.kind) for p in function.params]
        self.assertEqual(kinds, [
            ("a", ParameterKind.POSITIONAL_ONLY),
            ("b", ParameterKind.POSITIONAL_OR_KEYWORD),
            ("args", ParameterKind.VAR_POSITIONAL),
            ("c", ParameterKind.KEYWORD_ONLY),
            ("d", ParameterKind.KEYWORD_ONLY),
            ("kw", ParameterKind.VAR_KEYWORD),
        ])
        self.assertTrue(function.params[2].is_vararg)
        self.assertTrue(function.params[5].is_kwarg)
        self.assertEqual(function.params[4].default, Num(1, line=1, column=28))
        self.assertEqual(function.returns.id, "int")
        self.assertIsInstance(function.body[0], Return)

    def test_annotations(self):
        function = self._statement("def f(x: int, *, y: str = 'a'):\n    pass\n")
        self.assertEqual(function.params[0].annotation.id, "int")
        self.assertEqual(function.params[1].kind, ParameterKind.KEYWORD_ONLY)
        self.assertEqual(function.params[1].default.value, "a")

    def test_non_default_after_default_warns(self):
        source = "def f(a=1, b):\n    pass\n"
        tokens, _ = tokenize(source)
        parser = Parser(tokens, source)
        module = parser.parse()

        self.assertIsInstance(module.body[0], FunctionDef)
        self.assertEqual(len(parser.warnings), 1)
        self.assertEqual(parser.warnings[0].message,
                         "Non-default parameter 'b' follows default parameter")

    def test_keyword_only_after_default_does_not_warn(self):
        source = "def f(a=1, *, b):\n    pass\n"
        tokens, _ = tokenize(source)
        parser = Parser(tokens, source)
        parser.parse()
        self.assertEqual(parser.warnings, [])

    def test_parameter_errors(self):
        cases = {
            "def f(a,):\n    pass\n": "Trailing comma in parameter list",
            "def f(**kw, a):\n    pass\n": "Parameter after **kwargs is not allowed",
            "def f(*args=1):\n    pass\n": "Variadic argument cannot have default value",
            "def f(**kw=1):\n    pass\n": "Keyword argument cannot have default value",
            "def f(*, *b):\n    pass\n": "Only one '*' is allowed in a parameter list",
            "def f(*):\n    pass\n": "Named arguments must follow bare *",
            "def f(/):\n    pass\n": "Invalid position for '/'",
            "def f(a b):\n    pass\n": "Expected comma between parameters",
            "def f(1):\n    pass\n": "Expected parameter name, * or **",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                self.assertEqual(self._single_error(source).message, message)

    def test_async_def(self):
        function = self._statement("async def f():\n    await g()\n")
        self.assertTrue(function.is_async)
        self.assertEqual((function.line, function.column), (1, 1))
        self.assertIsInstance(function.body[0].value, Await)

    def test_lambda(self):
        node = self._expression("lambda x, y=2, *a, **k: x\n")
        self.assertIsInstance(node, Lambda)
        self.assertEqual([p.name for p in node.params], ["x", "y", "a", "k"])
        self.assertEqual(node.body.id, "x")

    def test_lambda_allows_trailing_comma(self):
        node = self._expression("lambda x,: x\n")
        self.assertEqual(len(node.params), 1)

    def test_class_with_bases_and_keywords(self):
        klass = self._statement("class A(B, metaclass=M):\n    pass\n")
        self.assertIsInstance(klass, ClassDef)
        self.assertEqual([b.id for b in klass.bases], ["B"])
        self.assertEqual(klass.keywords[0].arg, "metaclass")
        self.assertEqual(klass.keywords[0].value.id, "M")

    def test_class_missing_comma(self):
        error = self._single_error("class A(B C):\n    pass\n")
        self.assertEqual(error.message, "Expected comma between base classes")

    def test_decorators(self):
        function = self._statement("@dec\n@mod.attr(1)\ndef f():\n    pass\n")
        self.assertEqual(len(function.decorators), 2)
        self.assertIsInstance(function.decorators[1], Call)
        self.assertIsInstance(function.decorators[1].func, Attribute)

    def test_invalid_decorator(self):
        errors = self._errors("@1\ndef f():\n    pass\n")
        self.assertEqual([e.message for e in errors], ["Invalid decorator expression"])

    def test_decorator_without_definition(self):
        error = self._single_error("@dec\nx = 1\n")
        self.assertEqual(error.message, "Expected function or class definition after decorators")


class TestControlFlow(ParserTestCase):
    """if, while, for, try, with and match."""

    def test_elif_chain(self):
        statement = self._statement("if a:\n    pass\nelif b:\n    pass\nelse:\n    pass\n")
        self.assertIsInstance(statement.orelse[0], If)
        self.assertEqual(statement.orelse[0].test.id, "b")
        self.assertIsInstance(statement.orelse[0].orelse[0], Pass)

    def test_one_line_suite(self):
        statement = self._statement("if x: a = 1; b = 2\n")
        self.assertEqual(len(statement.body), 2)

    def test_one_line_suite_rejects_compound_statements(self):
        for source in ("if x: if y: pass\n", "for x in y: def f(): pass\n",
                       "while x: pass; for i in y: pass\n", "if x: match y:\n    case 1: pass\n"):
            with self.subTest(source=source):
                error = self._errors(source)[0]
                self.assertEqual(error.kind, ParseErrorKind.INVALID_SYNTAX)
                self.assertEqual(error.message, "Compound statement not allowed in a one-line suite")

    def test_if_missing_colon(self):
        error = self._single_error("if x\n    pass\n")
        self.assertEqual(error.message, "Expected ':' after if condition")

    def test_assignment_in_condition(self):
        error = self._single_error("if x = 1:\n    pass\n")
        self.assertEqual(error.message, "Cannot use assignment in a condition")

    def test_empty_condition(self):
        error = self._single_error("if :\n    pass\n")
        self.assertEqual(error.kind, ParseErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual(error.message, "Expected 'expression', but found ':'")

    def test_for_with_tuple_target(self):
        statement = self._statement("for i, (j, k) in pairs:\n    break\nelse:\n    pass\n")
        self.assertIsInstance(statement, For)
        self.assertIsInstance(statement.target, Tuple)
        self.assertEqual(statement.target.ctx, ExprContext.STORE)
        inner = statement.target.elts[1]
        self.assertEqual(inner.ctx, ExprContext.STORE)
        self.assertEqual([e.ctx for e in inner.elts], [ExprContext.STORE] * 2)
        self.assertIsInstance(statement.body[0], Break)
        self.assertIsInstance(statement.orelse[0], Pass)

    def test_for_missing_in(self):
        error = self._single_error("for x of y:\n    pass\n")
        self.assertEqual(error.message, "Expected 'in', but found 'of'")

    def test_while_else(self):
        statement = self._statement("while x:\n    continue\nelse:\n    pass\n")
        self.assertIsInstance(statement, While)
        self.assertIsInstance(statement.body[0], Continue)
        self.assertEqual(len(statement.orelse), 1)

    def test_try_statement(self):
        source = ("try:\n    pass\nexcept ValueError as e:\n    pass\nexcept:\n    pass\n"
                  "else:\n    pass\nfinally:\n    pass\n")
        statement = self._statement(source)
        self.assertIsInstance(statement, Try)
        self.assertEqual(len(statement.handlers), 2)
        self.assertEqual(statement.handlers[0].type.id, "ValueError")
        self.assertEqual(statement.handlers[0].name, "e")
        self.assertIsNone(statement.handlers[1].type)
        self.assertEqual(len(statement.orelse), 1)
        self.assertEqual(len(statement.finalbody), 1)

    def test_try_without_handlers(self):
        error = self._single_error("try:\n    pass\nx = 1\n")
        self.assertEqual(error.message, "Expected 'except' or 'finally' block")

    def test_stray_clauses(self):
        cases = {
            "except:\n    pass\n": "'except' statement outside of try block",
            "finally:\n    pass\n": "'finally' statement outside of try block",
            "elif x:\n    pass\n": "'elif' without matching 'if'",
            "else:\n    pass\n": "'else' without matching 'if', 'for', 'while' or 'try'",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                self.assertEqual(self._single_error(source).message, message)

    def test_with_items(self):
        statement = self._statement("with open(p) as f, lock:\n    pass\n")
        self.assertIsInstance(statement, With)
        self.assertEqual(len(statement.items), 2)
        self.assertEqual(statement.items[0].optional_vars.id, "f")
        self.assertEqual(statement.items[0].optional_vars.ctx, ExprContext.STORE)
        self.assertIsNone(statement.items[1].optional_vars)

    def test_async_for_and_with(self):
        source = ("async def f():\n"
                  "    async for x in y:\n        pass\n"
                  "    async with a as b:\n        pass\n")
        function = self._statement(source)
        self.assertTrue(function.body[0].is_async)
        self.assertIsInstance(function.body[0], For)
        self.assertTrue(function.body[1].is_async)
        self.assertIsInstance(function.body[1], With)

    def test_async_without_definition(self):
        error = self._single_error("async x\n")
        self.assertEqual(error.message, "Expected 'def', 'for', or 'with' after 'async'")

    def test_match_statement(self):
        source = ("match command:\n"
                  "    case [x, *rest]:\n        pass\n"
                  "    case Point(x=0) | None:\n        pass\n"
                  "    case _ if flag:\n        pass\n")
        statement = self._statement(source)
        self.assertIsInstance(statement, Match)
        self.assertEqual(statement.subject.id, "command")
        self.assertEqual(len(statement.cases), 3)

        first = statement.cases[0].pattern
        self.assertIsInstance(first, List)
        self.assertEqual(first.elts[0].ctx, ExprContext.STORE)
        self.assertEqual(first.elts[1].value.ctx, ExprContext.STORE)

        second = statement.cases[1].pattern
        self.assertIsInstance(second, BinOp)
        self.assertEqual(second.op, Operator.BIT_OR)

        third = statement.cases[2]
        self.assertEqual(third.pattern.ctx, ExprContext.LOAD)
        self.assertEqual(third.guard.id, "flag")

    def test_case_as_pattern(self):
        source = "match p:\n    case (1 | 2) as n:\n        pass\n"
        pattern = self._statement(source).cases[0].pattern
        self.assertIsInstance(pattern, NamedExpr)
        self.assertEqual(pattern.target.id, "n")
        self.assertEqual(pattern.target.ctx, ExprContext.STORE)

    def test_match_conditional_subject(self):
        source = "match a if b else c:\n    case 1:\n        pass\n"
        statement = self._statement(source)
        self.assertIsInstance(statement, Match)
        self.assertIsInstance(statement.subject, IfExp)
        self.assertEqual(statement.subject.test.id, "b")

    def test_match_is_a_soft_keyword(self):
        module = self._parse("match = 1\nmatch.group()\nmatch(x)\n")
        self.assertIsInstance(module.body[0], Assign)
        self.assertEqual(module.body[0].targets[0].id, "match")
        self.assertIsInstance(module.body[1], Expr)
        self.assertIsInstance(module.body[2].value, Call)

    def test_case_outside_match(self):
        error = self._single_error("case x:\n    pass\n")
        self.assertEqual(error.message, "'case' statement outside of match")


class TestSimpleStatements(ParserTestCase):
    """Assignments, imports and the other one-line statements."""

    def test_chained_assignment(self):
        statement = self._statement("a = b = 1\n")
        self.assertEqual([t.id for t in statement.targets], ["a", "b"])
        self.assertTrue(all(t.ctx is ExprContext.STORE for t in statement.targets))
        self.assertEqual(statement.value, Num(1, line=1, column=9))

    def test_starred_unpacking(self):
        statement = self._statement("a, *b = xs\n")
        target = statement.targets[0]
        self.assertIsInstance(target, Tuple)
        self.assertIsInstance(target.elts[1], Starred)
        self.assertEqual(target.elts[1].ctx, ExprContext.STORE)
        self.assertEqual(target.elts[1].value.ctx, ExprContext.STORE)

    def test_augmented_assignment(self):
        statement = self._statement("x.y[0] -= 1\n")
        self.assertIsInstance(statement, AugAssign)
        self.assertEqual(statement.op, Operator.SUB)
        self.assertIsInstance(statement.target, Subscript)
        self.assertEqual(statement.target.ctx, ExprContext.STORE)
        self.assertEqual(statement.target.value.ctx, ExprContext.LOAD)

    def test_annotated_assignment(self):
        statement = self._statement("x: int = 5\n")
        self.assertIsInstance(statement, AnnAssign)
        self.assertEqual(statement.annotation.id, "int")
        self.assertEqual(statement.value.value, 5)

        bare = self._statement("x: int\n")
        self.assertIsNone(bare.value)

    def test_invalid_targets(self):
        cases = {
            "1 = x\n": "Cannot assign to literal",
            "f() = 1\n": "Cannot assign to function call",
            "a + b = 1\n": "Cannot assign to expression",
            "(a, 1) = x\n": "Cannot assign to literal",
            "f() += 1\n": "Invalid augmented assignment target",
            "a, b: int\n": "Invalid annotated assignment target",
            "(a.b := 1)\n": "Invalid target for walrus operator",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                error = self._single_error(source)
                self.assertEqual(error.message, message)
                self.assertEqual(error.diagnostic.code, "P004")

    def test_semicolons(self):
        module = self._parse("a = 1; b = 2\nc = 3;\n")
        self.assertEqual(len(module.body), 3)

    def test_imports(self):
        statement = self._statement("import os.path as p, sys\n")
        self.assertIsInstance(statement, Import)
        self.assertEqual([(a.name, a.asname) for a in statement.names],
                         [("os.path", "p"), ("sys", None)])

        statement = self._statement("from ..pkg.mod import (a as b, c,)\n")
        self.assertIsInstance(statement, ImportFrom)
        self.assertEqual(statement.level, 2)
        self.assertEqual(statement.module, "pkg.mod")
        self.assertEqual([(a.name, a.asname) for a in statement.names], [("a", "b"), ("c", None)])

        statement = self._statement("from . import x\n")
        self.assertEqual((statement.level, statement.module), (1, None))

        statement = self._statement("from ... import x\n")
        self.assertEqual(statement.level, 3)

        statement = self._statement("from os import *\n")
        self.assertEqual(statement.names[0].name, "*")

    def test_import_errors(self):
        self.assertEqual(self._single_error("from import x\n").message,
                         "Expected module name after 'from'")
        self.assertEqual(self._single_error("import\n").message,
                         "Expected module name after 'import'")
        self.assertEqual(self._single_error("from os import\n").message,
                         "Expected import item after 'import'")

    def test_global_nonlocal_del(self):
        module = self._parse("global a, b\nnonlocal c\ndel x, y[0], z.w\n")
        self.assertIsInstance(module.body[0], Global)
        self.assertEqual(module.body[0].names, ["a", "b"])
        self.assertIsInstance(module.body[1], Nonlocal)
        delete = module.body[2]
        self.assertIsInstance(delete, Delete)
        self.assertEqual([t.ctx for t in delete.targets], [ExprContext.DEL] * 3)

    def test_raise_and_assert(self):
        module = self._parse("raise ValueError('x') from err\nassert x, 'msg'\nraise\n")
        self.assertIsInstance(module.body[0], Raise)
        self.assertEqual(module.body[0].cause.id, "err")
        self.assertIsInstance(module.body[1], Assert)
        self.assertEqual(module.body[1].msg.value, "msg")
        self.assertIsNone(module.body[2].exc)

    def test_missing_newline_suggests_keyword(self):
        error = self._single_error("retrun x\n")
        self.assertEqual(error.message, "Expected newline after statement")
        self.assertIn("return", error.suggestion)


class TestExpressions(ParserTestCase):
    """Displays, comprehensions, trailers and calls."""

    def test_displays(self):
        self.assertEqual(self._expression("()\n"), Tuple([], line=1, column=1))
        self.assertIsInstance(self._expression("(1,)\n"), Tuple)
        self.assertIsInstance(self._expression("(1)\n"), Num)
        self.assertEqual(self._expression("[]\n"), List([], line=1, column=1))
        self.assertEqual(self._expression("{}\n"), Dict([], [], line=1, column=1))
        self.assertIsInstance(self._expression("{1, 2}\n"), Set)
        self.assertIsInstance(self._expression("[*a, b]\n").elts[0], Starred)

    def test_dict_unpacking(self):
        node = self._expression("{**a, 'k': 1}\n")
        self.assertIsInstance(node, Dict)
        self.assertIsNone(node.keys[0])
        self.assertEqual(node.keys[1].value, "k")

    def test_comprehensions(self):
        node = self._expression("[x * 2 for x in xs if x if y]\n")
        self.assertIsInstance(node, ListComp)
        self.assertEqual(len(node.generators), 1)
        self.assertEqual(len(node.generators[0].ifs), 2)
        self.assertEqual(node.generators[0].target.ctx, ExprContext.STORE)

        node = self._expression("{k: v for k, v in items}\n")
        self.assertIsInstance(node, DictComp)
        self.assertIsInstance(node.generators[0].target, Tuple)

        self.assertIsInstance(self._expression("{x for x in s}\n"), SetComp)
        self.assertIsInstance(self._expression("(x for x in s)\n"), GeneratorExp)
        self.assertEqual(len(self._expression("[a for b in c for a in b]\n").generators), 2)

    def test_conditional_element_in_comprehension(self):
        node = self._expression("[a if c else b for a in xs]\n")
        self.assertIsInstance(node.elt, IfExp)
        self.assertEqual(node.generators[0].ifs, [])

    def test_generator_argument(self):
        call = self._expression("f(x for x in y)\n")
        self.assertIsInstance(call.args[0], GeneratorExp)

        for source in ("f(x for x in y, 1)\n", "f(x for x in y,)\n"):
            with self.subTest(source=source):
                error = self._single_error(source)
                self.assertEqual(error.message, "Generator expression must be parenthesized")

    def test_call_arguments(self):
        call = self._expression("f(a, *b, c=1, **d)\n")
        self.assertEqual(len(call.args), 2)
        self.assertIsInstance(call.args[1], Starred)
        self.assertEqual([k.arg for k in call.keywords], ["c", None])

    def test_argument_errors(self):
        self.assertEqual(self._single_error("f(a=1, b)\n").message,
                         "Positional argument after keyword argument")
        self.assertEqual(self._single_error("f(a,,b)\n").message,
                         "Expected expression between commas")

    def test_subscripts(self):
        node = self._expression("a[1:2]\n")
        self.assertEqual(node.slice, Slice(Num(1, line=1, column=3), Num(2, line=1, column=5),
                                           None, line=1, column=3))
        node = self._expression("a[::2]\n")
        self.assertIsNone(node.slice.lower)
        self.assertEqual(node.slice.step.value, 2)

        node = self._expression("a[1:2, 3]\n")
        self.assertIsInstance(node.slice, Tuple)
        self.assertIsInstance(node.slice.elts[0], Slice)

        self.assertIsInstance(self._expression("a[...]\n").slice, Ellipsis)

    def test_attribute_chain(self):
        node = self._expression("a.b.c\n")
        self.assertEqual(node.attr, "c")
        self.assertEqual(node.value.attr, "b")
        self.assertEqual(node.value.value.id, "a")

    def test_conditional_expression(self):
        statement = self._statement("x = a if b else c\n")
        self.assertIsInstance(statement.value, IfExp)
        self.assertEqual(statement.value.body.id, "a")

    def test_string_concatenation(self):
        self.assertEqual(self._expression("'a' 'b'\n").value, "ab")
        self.assertEqual(self._expression("b'a' b'b'\n"), Bytes(b"ab", line=1, column=1))
        self.assertEqual(self._single_error("'a' b'b'\n").message,
                         "Cannot mix bytes and nonbytes literals")

    def test_constants(self):
        self.assertEqual(self._expression("None\n"), NameConstant(None, line=1, column=1))
        self.assertIsNot(self._expression("False\n").value, None)

    def test_operator_errors(self):
        self.assertEqual(self._single_error("x = 1 + * 2\n").message,
                         "Invalid syntax: consecutive operators")
        self.assertEqual(self._single_error("x = 1 +").message, "Incomplete expression")
        self.assertEqual(self._single_error("a not b\n").message,
                         "Expected 'in' after 'not' in comparison")

    def test_unclosed_delimiters(self):
        cases = {
            "foo(1, 2\n": "Unclosed parenthesis",
            "x = [1, 2\n": "Unclosed bracket",
            "d = {1: 2\n": "Unclosed brace",
            "x = (\n": "Unclosed parenthesis",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                error = self._single_error(source)
                self.assertEqual(error.message, message)
                self.assertEqual(error.diagnostic.code, "P003")

    def test_unclosed_delimiter_before_more_code(self):
        cases = {
            "x = [1, 2\ny = 3\n": ("Unclosed bracket", 5),
            "foo(1, 2\nbar()\n": ("Unclosed parenthesis", 4),
            "d = {1: 2\nx = [3]\n": ("Unclosed brace", 5),
        }
        for source, (message, column) in cases.items():
            with self.subTest(source=source):
                error = self._single_error(source)
                self.assertEqual(error.message, message)
                self.assertEqual((error.line, error.column), (1, column))

    def test_unexpected_end_of_file(self):
        error = self._single_error("x =")
        self.assertEqual(error.kind, ParseErrorKind.EOF)
        self.assertEqual(error.message, "Unexpected end of file, expected expression")

    def test_parse_expression_source(self):
        node = parse_expression_source("1 + 2 * 3")
        self.assertIsInstance(node, BinOp)
        self.assertEqual(node.op, Operator.ADD)

        with self.assertRaises(ParseFailure):
            parse_expression_source("1 +)")


class TestFStrings(ParserTestCase):
    """Replacement fields, conversions and format specs."""

    def test_conversion_and_nested_format_spec(self):
        node = self._expression('f"x={x!r:>{w}} and {{lit}}"\n')
        self.assertIsInstance(node, JoinedStr)
        self.assertEqual(len(node.values), 3)

        head, field, tail = node.values
        self.assertEqual(head.value, "x=")
        self.assertIsInstance(field, FormattedValue)
        self.assertEqual(field.value.id, "x")
        self.assertEqual(field.conversion, "r")
        self.assertIsInstance(field.format_spec, JoinedStr)
        self.assertEqual(field.format_spec.values[0].value, ">")
        self.assertEqual(field.format_spec.values[1].value.id, "w")
        self.assertEqual(tail.value, " and {lit}")

    def test_quote_as_fill_character(self):
        statement = self._statement("x = f\"{v:'>10}\"\n")
        field = statement.value.values[0]
        self.assertIsInstance(field, FormattedValue)
        self.assertEqual(field.value.id, "v")
        self.assertEqual(field.format_spec.values[0].value, "'>10")

    def test_plain_fstring_collapses_to_str(self):
        self.assertEqual(self._expression('f"plain"\n'), Str("plain", line=1, column=1))
        self.assertEqual(self._expression('f""\n'), Str("", line=1, column=1))

    def test_field_positions_point_into_source(self):
        statement = self._statement('x = f"ab{name}"\n')
        name = statement.value.values[1].value
        self.assertEqual((name.line, name.column), (1, 10))

    def test_nested_quotes_and_raw(self):
        node = self._expression("f\"{d['k']}\"\n")
        self.assertIsInstance(node.values[0].value, Subscript)

        node = self._expression('rf"\\d{x}"\n')
        self.assertEqual(node.values[0].value, "\\d")

    def test_fstring_errors(self):
        self.assertEqual(self._single_error('f"{}"\n').message,
                         "f-string: empty expression not allowed")
        self.assertEqual(self._single_error('f"{x!z}"\n').message,
                         "Invalid conversion character 'z': expected 's', 'r', or 'a'")
        error = self._single_error('f"{1 +}"\n')
        self.assertTrue(error.message.startswith("Invalid expression in f-string"))
        self.assertEqual(error.diagnostic.code, "P011")


class TestContexts(ParserTestCase):
    """Statements that are only legal inside a function or loop."""

    def test_outside_of_required_context(self):
        cases = {
            "return 1\n": "Return statement outside of function",
            "yield x\n": "Yield statement outside of function",
            "await x\n": "'await' outside function",
            "break\n": "'break' outside loop",
            "continue\n": "'continue' outside loop",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                error = self._single_error(source)
                self.assertEqual(error.message, message)
                self.assertEqual((error.line, error.column), (1, 1))

    def test_yield_forms(self):
        source = ("def g():\n    yield\n    yield 1\n    x = yield\n"
                  "    yield from other\n")
        function = self._statement(source)
        self.assertIsNone(function.body[0].value.value)
        self.assertIsInstance(function.body[1].value, Yield)
        self.assertIsInstance(function.body[2].value, Yield)
        self.assertIsInstance(function.body[3].value, YieldFrom)

    def test_contexts_are_searched_by_membership(self):
        """A loop anywhere on the stack permits break, even across a def."""
        self._parse("while x:\n    def f():\n        break\n")

    def test_context_stack_is_restored(self):
        source = "def f():\n    for x in y:\n        pass\n"
        tokens, _ = tokenize(source)
        parser = Parser(tokens, source)
        parser.parse()
        self.assertEqual(parser.context_stack, [ParserContext.NORMAL])

    def test_sub_parser_contexts(self):
        node = parse_expression_source("await x", [ParserContext.NORMAL, ParserContext.FUNCTION])
        self.assertIsInstance(node, Await)


class TestRecovery(ParserTestCase):
    """Error reporting, synchronization and block structure."""

    def test_errors_in_source_order(self):
        errors = self._errors("return 1\nbreak\nx = 1\n")
        self.assertEqual([e.line for e in errors], [1, 2])

    def test_unexpected_indent(self):
        error = self._single_error("x = 1\n    y = 2\n")
        self.assertEqual(error.message, "Unexpected indent")
        self.assertEqual(error.line, 2)

    def test_expected_indented_block(self):
        error = self._single_error("if x:\nprint(x)\n")
        self.assertEqual(error.message, "Expected an indented block")
        self.assertEqual(error.line, 2)

    def test_error_in_block_keeps_siblings(self):
        source = "def f():\n    x = )\n    return 1\n"
        tokens, _ = tokenize(source)
        parser = Parser(tokens, source)
        with self.assertRaises(ParseFailure):
            parser.parse()
        self.assertEqual(len(parser.errors), 1)
        self.assertEqual(parser.errors[0].line, 2)

    def test_snippet_attached(self):
        error = self._single_error("x = 1\ny = 1 + * 2\n")
        self.assertEqual(error.diagnostic.snippet, "y = 1 + * 2")
        self.assertTrue(str(error).startswith("Line 2, column 9:"))

    def test_lexer_errors_surface(self):
        with self.assertRaises(ParseFailure) as caught:
            parse_source("x = $\n")
        failure = caught.exception
        self.assertEqual(len(failure.lexer_errors), 1)
        self.assertEqual(failure.errors[0].message, "Invalid token: Unexpected character: $")
        self.assertEqual(len(failure.all_errors), 2)

    def test_parse_accepts_tokens_without_eof(self):
        tokens, _ = tokenize("x = 1\n")
        module = parse(tokens[:-1])
        self.assertIsInstance(module.body[0], Assign)


class TestTreeUtilities(ParserTestCase):
    """dump() and the visitor."""

    def test_dump(self):
        module = self._parse("a < b not in c\n")
        self.assertEqual(
            dump(module.body[0].value),
            "Compare(left=Name(id='a'), ops=[Lt, NotIn], comparators=[Name(id='b'), Name(id='c')])",
        )

    def test_visitor(self):
        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_Name(self, node):
                self.names.append(node.id)

        collector = NameCollector()
        module = self._parse("def f(a):\n    return a + b\nc = f(d)\n")
        module.accept(collector)
        self.assertEqual(collector.names, ["a", "b", "c", "f", "d"])
        self.assertEqual(module.body[0].node_type, "FunctionDef")
        self.assertEqual([child.node_type for child in module.body[1].children()], ["Name", "Call"])


if __name__ == '__main__':
    unittest.main()
