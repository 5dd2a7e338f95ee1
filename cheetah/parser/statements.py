"""
Statement parsing for Cheetah.

Simple statements end at a NEWLINE or semicolon; compound statements end
with a suite, which is either an indented block or a one-line body after
the colon.
"""

import typing
from typing import Optional

from ..lexer.errors import ErrorRecovery
from ..lexer.tokens import TokenType, CLOSING_BRACKETS
from .ast_nodes import (
    Statement, Expression, ExprContext, Operator, Parameter, ParameterKind,
    FunctionDef, ClassDef, Return, Delete, Assign, AugAssign, AnnAssign, For, While, If,
    With, WithItem, Raise, Try, ExceptHandler, Assert, Import, ImportFrom, Alias, Global,
    Nonlocal, Expr, Pass, Break, Continue, Match, MatchCase, Name, Attribute, Subscript,
    Call, Starred, Tuple, List, BinOp, Dict, NamedExpr, set_context,
)
from .context import ParserContext
from .errors import ParseError, create_unexpected_token_error
from .expressions import AUGMENTED_ASSIGNMENTS

STATEMENT_END = (TokenType.NEWLINE, TokenType.SEMICOLON, TokenType.EOF, TokenType.DEDENT)

STRAY_CLAUSES = {
    TokenType.EXCEPT: "'except' statement outside of try block",
    TokenType.FINALLY: "'finally' statement outside of try block",
    TokenType.ELIF: "'elif' without matching 'if'",
    TokenType.ELSE: "'else' without matching 'if', 'for', 'while' or 'try'",
}

COMPOUND_STARTS = (
    TokenType.IF, TokenType.WHILE, TokenType.FOR, TokenType.TRY, TokenType.WITH,
    TokenType.DEF, TokenType.CLASS, TokenType.AT, TokenType.ASYNC,
)

SIMPLE_TARGETS = (Name, Attribute, Subscript)


class StatementParserMixin:
    """Statement productions of the Cheetah parser."""

    def _parse_statement(self) -> Statement:
        """Parse one statement, dispatching on its first token."""
        token = self._peek()
        token_type = token.type

        if token_type is TokenType.INDENT:
            raise self._syntax_error("Unexpected indent", token, code="P009",
                                     suggestion="Remove the extra indentation")
        if token_type is TokenType.SEMICOLON:
            self._advance()
            return Pass(line=token.line, column=token.column)

        if token_type is TokenType.AT:
            return self._parse_decorated()
        elif token_type is TokenType.ASYNC:
            return self._parse_async()
        elif token_type is TokenType.DEF:
            return self._parse_function_def()
        elif token_type is TokenType.CLASS:
            return self._parse_class_def()
        elif token_type is TokenType.IF:
            return self._parse_if()
        elif token_type is TokenType.WHILE:
            return self._parse_while()
        elif token_type is TokenType.FOR:
            return self._parse_for()
        elif token_type is TokenType.TRY:
            return self._parse_try()
        elif token_type is TokenType.WITH:
            return self._parse_with()
        elif token_type in STRAY_CLAUSES:
            raise self._syntax_error(STRAY_CLAUSES[token_type], token, code="P009")

        if self._starts_soft_block("match"):
            return self._parse_match()
        if self._starts_soft_block("case"):
            raise self._syntax_error("'case' statement outside of match", token, code="P005")

        return self._parse_simple_statement()

    def _parse_simple_statement(self) -> Statement:
        token_type = self._peek().type
        if token_type is TokenType.RETURN:
            statement = self._parse_return()
        elif token_type is TokenType.PASS:
            token = self._advance()
            statement = Pass(line=token.line, column=token.column)
        elif token_type is TokenType.BREAK:
            statement = self._parse_loop_control(Break, "'break' outside loop")
        elif token_type is TokenType.CONTINUE:
            statement = self._parse_loop_control(Continue, "'continue' outside loop")
        elif token_type is TokenType.RAISE:
            statement = self._parse_raise()
        elif token_type is TokenType.ASSERT:
            statement = self._parse_assert()
        elif token_type is TokenType.IMPORT:
            statement = self._parse_import()
        elif token_type is TokenType.FROM:
            statement = self._parse_import_from()
        elif token_type is TokenType.GLOBAL:
            statement = self._parse_name_list(Global)
        elif token_type is TokenType.NONLOCAL:
            statement = self._parse_name_list(Nonlocal)
        elif token_type is TokenType.DEL:
            statement = self._parse_del()
        else:
            return self._parse_expression_statement()

        self._consume_statement_end()
        return statement

    def _starts_soft_block(self, word: str) -> bool:
        """
        Check whether the soft keyword `word` heads a block here.

        `match` and `case` are ordinary names unless followed by an
        expression and a colon, so this runs a trial parse and rewinds.
        """
        if not self._check_soft_keyword(word):
            return False
        saved = (self.current, self.indent_level, len(self.warnings))
        try:
            self._advance()
            if word == "case":
                with self.in_context(ParserContext.MATCH):
                    self._parse_star_expressions()
            else:
                self._parse_star_expressions()
            return self._check(TokenType.COLON) or (
                word == "case" and self._check(TokenType.IF, TokenType.AS))
        except ParseError:
            return False
        finally:
            self.current, self.indent_level = saved[0], saved[1]
            del self.warnings[saved[2]:]

    # ------------------------------------------------------------------
    # Statement ends and suites
    # ------------------------------------------------------------------

    def _consume_statement_end(self, expr: Optional[Expression] = None):
        """Consume `;`, NEWLINE, or nothing before EOF and DEDENT."""
        if self._match(TokenType.SEMICOLON):
            while self._match(TokenType.SEMICOLON):
                pass
            self._match(TokenType.NEWLINE)
            return
        if self._match(TokenType.NEWLINE) or self._check(TokenType.EOF, TokenType.DEDENT):
            return

        token = self._peek()
        if token.lexeme in CLOSING_BRACKETS:
            raise create_unexpected_token_error("newline", token)

        suggestion = None
        if isinstance(expr, Name):
            corrections = ErrorRecovery.suggest_keyword_corrections(expr.id)
            if corrections:
                suggestion = f"Did you mean '{corrections[0]}'?"
        raise self._syntax_error("Expected newline after statement", token, suggestion=suggestion)

    def _parse_suite(self) -> typing.List[Statement]:
        """Parse the body after a compound statement's colon."""
        if self._check(TokenType.NEWLINE):
            if not self._check_next(TokenType.INDENT):
                raise self._syntax_error("Expected an indented block", self._peek_next(), code="P009")
            self._advance()
            return self._parse_block()

        if self._check(TokenType.EOF):
            raise create_unexpected_token_error("statement", self._peek())

        # One-liner: simple statements separated by semicolons
        body = [self._parse_one_line_statement()]
        while self._previous().type is TokenType.SEMICOLON and not self._check(*STATEMENT_END):
            body.append(self._parse_one_line_statement())
        return body

    def _parse_one_line_statement(self) -> Statement:
        token = self._peek()
        if token.type is TokenType.SEMICOLON:
            self._advance()
            return Pass(line=token.line, column=token.column)
        if token.type in COMPOUND_STARTS or self._starts_soft_block("match"):
            raise self._syntax_error("Compound statement not allowed in a one-line suite", token,
                                     suggestion="Move it to an indented block")
        if token.type in STRAY_CLAUSES:
            raise self._syntax_error(STRAY_CLAUSES[token.type], token, code="P009")
        return self._parse_simple_statement()

    def _parse_block(self) -> typing.List[Statement]:
        self._consume(TokenType.INDENT, "indent")
        level = self.indent_level
        body = []
        while not self._check(TokenType.DEDENT, TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue
            body.extend(self._parse_statement_recovering())

        if self.indent_level != level:
            raise self._syntax_error("Inconsistent indentation level", code="P009")
        self._match(TokenType.DEDENT)
        return body

    def _parse_colon_suite(self, after: str) -> typing.List[Statement]:
        self._consume(TokenType.COLON, ":", suggestion=f"Add ':' after {after}")
        return self._parse_suite()

    # ------------------------------------------------------------------
    # Expression statements
    # ------------------------------------------------------------------

    def _parse_expression_statement(self) -> Statement:
        start = self._peek()
        expr = self._parse_expression()

        if self._check(TokenType.ASSIGN):
            targets = [expr]
            while self._match(TokenType.ASSIGN):
                targets.append(self._parse_expression())
            value = targets.pop()
            for target in targets:
                self._validate_target(target)
            for target in targets:
                set_context(target, ExprContext.STORE)
            self._consume_statement_end()
            return Assign(targets, value, line=start.line, column=start.column)

        if self._peek().type in AUGMENTED_ASSIGNMENTS:
            op_token = self._advance()
            if not isinstance(expr, SIMPLE_TARGETS):
                raise self._syntax_error("Invalid augmented assignment target", expr, code="P004")
            value = self._parse_expression()
            self._consume_statement_end()
            return AugAssign(set_context(expr, ExprContext.STORE),
                             AUGMENTED_ASSIGNMENTS[op_token.type], value,
                             line=start.line, column=start.column)

        if self._check(TokenType.COLON):
            self._advance()
            if not isinstance(expr, SIMPLE_TARGETS):
                raise self._syntax_error("Invalid annotated assignment target", expr, code="P004")
            annotation = self._parse_test()
            value = self._parse_expression() if self._match(TokenType.ASSIGN) else None
            self._consume_statement_end()
            return AnnAssign(set_context(expr, ExprContext.STORE), annotation, value,
                             line=start.line, column=start.column)

        self._consume_statement_end(expr)
        return Expr(expr, line=start.line, column=start.column)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _parse_decorated(self) -> Statement:
        decorators = []
        while self._check(TokenType.AT):
            self._advance()
            decorator = self._parse_atom_expr()
            if not _is_decorator(decorator):
                raise self._syntax_error("Invalid decorator expression", decorator)
            self._consume(TokenType.NEWLINE, "newline")
            decorators.append(decorator)

        if self._check(TokenType.DEF):
            return self._parse_function_def(decorators)
        if self._check(TokenType.ASYNC) and self._check_next(TokenType.DEF):
            async_token = self._advance()
            return self._parse_function_def(decorators, is_async=True, start=async_token)
        if self._check(TokenType.CLASS):
            return self._parse_class_def(decorators)
        raise self._syntax_error("Expected function or class definition after decorators",
                                 code="P009")

    def _parse_async(self) -> Statement:
        token = self._advance()
        if self._check(TokenType.DEF):
            return self._parse_function_def(is_async=True, start=token)
        if self._check(TokenType.FOR):
            return self._parse_for(is_async=True, start=token)
        if self._check(TokenType.WITH):
            return self._parse_with(is_async=True, start=token)
        raise self._syntax_error("Expected 'def', 'for', or 'with' after 'async'")

    def _parse_function_def(self, decorators=None, is_async: bool = False, start=None) -> FunctionDef:
        def_token = self._advance()
        start = start or def_token
        name = self._consume_identifier("function name")
        opener = self._consume(TokenType.LEFT_PAREN, "(")
        params = self._parse_parameters(TokenType.RIGHT_PAREN, allow_annotations=True)
        self._consume_closing(TokenType.RIGHT_PAREN, opener)

        returns = None
        if self._match(TokenType.ARROW):
            returns = self._parse_test()

        self._consume(TokenType.COLON, ":", suggestion="Add ':' after the function signature")
        with self.in_context(ParserContext.FUNCTION):
            body = self._parse_suite()

        return FunctionDef(name.value, params, body, decorators or [], returns, is_async,
                           line=start.line, column=start.column)

    def _parse_parameters(self, closing: TokenType, allow_annotations: bool) -> typing.List[Parameter]:
        """
        Parse a def or lambda parameter list up to (not including) `closing`.

        Order: positional-only parameters and `/`, ordinary parameters,
        `*args` or a bare `*`, keyword-only parameters, `**kwargs`.
        """
        params = []
        kind = ParameterKind.POSITIONAL_OR_KEYWORD
        seen_default = False
        seen_star = False
        seen_kwargs = False

        while not self._check(closing):
            token = self._peek()
            if seen_kwargs:
                raise self._syntax_error("Parameter after **kwargs is not allowed", token, code="P006")

            if self._match(TokenType.DIVIDE):
                if not params or seen_star or any(p.kind is ParameterKind.POSITIONAL_ONLY for p in params):
                    raise self._syntax_error("Invalid position for '/'", token, code="P006")
                for param in params:
                    param.kind = ParameterKind.POSITIONAL_ONLY
                if not self._check(TokenType.COMMA, closing):
                    raise self._syntax_error("Expected comma or closing parenthesis after '/'",
                                             code="P006")
            elif self._match(TokenType.MULTIPLY):
                if seen_star:
                    raise self._syntax_error("Only one '*' is allowed in a parameter list",
                                             token, code="P006")
                seen_star = True
                kind = ParameterKind.KEYWORD_ONLY
                if self._check(TokenType.IDENTIFIER):
                    name = self._advance()
                    annotation = self._parse_annotation(allow_annotations)
                    if self._check(TokenType.ASSIGN):
                        raise self._syntax_error("Variadic argument cannot have default value",
                                                 code="P006")
                    params.append(Parameter(name.value, annotation, is_vararg=True,
                                            kind=ParameterKind.VAR_POSITIONAL,
                                            line=token.line, column=token.column))
                elif self._check(closing):
                    raise self._syntax_error("Named arguments must follow bare *", token, code="P006")
            elif self._match(TokenType.POWER):
                name = self._consume_identifier("parameter name")
                annotation = self._parse_annotation(allow_annotations)
                if self._check(TokenType.ASSIGN):
                    raise self._syntax_error("Keyword argument cannot have default value",
                                             code="P006")
                params.append(Parameter(name.value, annotation, is_kwarg=True,
                                        kind=ParameterKind.VAR_KEYWORD,
                                        line=token.line, column=token.column))
                seen_kwargs = True
            elif self._check(TokenType.IDENTIFIER):
                name = self._advance()
                annotation = self._parse_annotation(allow_annotations)
                default = None
                if self._match(TokenType.ASSIGN):
                    default = self._parse_test()
                    seen_default = True
                elif seen_default and not seen_star:
                    self._warn(f"Non-default parameter '{name.value}' follows default parameter",
                               name, suggestion="Give it a default value or move it earlier")
                params.append(Parameter(name.value, annotation, default, kind=kind,
                                        line=name.line, column=name.column))
            else:
                raise self._syntax_error("Expected parameter name, * or **", token, code="P006")

            if self._match(TokenType.COMMA):
                if self._check(closing) and allow_annotations:
                    raise self._syntax_error("Trailing comma in parameter list",
                                             self._previous(), code="P006")
                continue
            if not self._check(closing):
                if self._check(TokenType.IDENTIFIER):
                    raise self._syntax_error("Expected comma between parameters", code="P006")
                raise self._syntax_error("Expected comma or closing parenthesis", code="P006")
            break

        return params

    def _parse_annotation(self, allowed: bool) -> Optional[Expression]:
        if allowed and self._match(TokenType.COLON):
            return self._parse_test()
        return None

    def _parse_class_def(self, decorators=None) -> ClassDef:
        class_token = self._advance()
        name = self._consume_identifier("class name")
        bases, keywords = [], []
        if self._check(TokenType.LEFT_PAREN):
            opener = self._advance()
            bases, keywords = self._parse_arguments(opener, "Expected comma between base classes")
        body = self._parse_colon_suite("the class name")
        return ClassDef(name.value, bases, keywords, body, decorators or [],
                        line=class_token.line, column=class_token.column)

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _parse_if(self) -> If:
        token = self._advance()
        keyword = token.lexeme
        if self._check(TokenType.COLON):
            raise create_unexpected_token_error("expression", self._peek())
        if self._check(TokenType.IDENTIFIER) and self._check_next(TokenType.ASSIGN):
            raise self._syntax_error("Cannot use assignment in a condition", self._peek_next(),
                                     suggestion="Use '==' to compare or ':=' to bind a name")

        test = self._parse_test()
        if not self._check(TokenType.COLON):
            raise self._syntax_error(f"Expected ':' after {keyword} condition",
                                     suggestion=f"Add ':' at the end of the {keyword} line")
        self._advance()
        body = self._parse_suite()

        orelse = []
        if self._check(TokenType.ELIF):
            orelse = [self._parse_if()]
        elif self._match(TokenType.ELSE):
            orelse = self._parse_colon_suite("else")
        return If(test, body, orelse, line=token.line, column=token.column)

    def _parse_while(self) -> While:
        token = self._advance()
        test = self._parse_test()
        self._consume(TokenType.COLON, ":", suggestion="Add ':' after the while condition")
        with self.in_context(ParserContext.LOOP):
            body = self._parse_suite()
        orelse = self._parse_else_clause()
        return While(test, body, orelse, line=token.line, column=token.column)

    def _parse_for(self, is_async: bool = False, start=None) -> For:
        token = self._advance()
        start = start or token
        if self._check(TokenType.IN, TokenType.COLON, TokenType.NEWLINE, TokenType.EOF):
            raise self._syntax_error("Expected target after 'for'")

        target = self._parse_for_target()
        self._validate_target(target)
        set_context(target, ExprContext.STORE)
        self._consume(TokenType.IN, "in")
        iterable = self._parse_star_expressions()
        self._consume(TokenType.COLON, ":", suggestion="Add ':' after the for clause")
        with self.in_context(ParserContext.LOOP):
            body = self._parse_suite()
        orelse = self._parse_else_clause()
        return For(target, iterable, body, orelse, is_async, line=start.line, column=start.column)

    def _parse_else_clause(self) -> typing.List[Statement]:
        if self._match(TokenType.ELSE):
            return self._parse_colon_suite("else")
        return []

    def _parse_with(self, is_async: bool = False, start=None) -> With:
        token = self._advance()
        start = start or token
        items = [self._parse_with_item()]
        while self._match(TokenType.COMMA):
            if self._check(TokenType.COLON):
                raise self._syntax_error("Expected context manager after comma")
            items.append(self._parse_with_item())
        body = self._parse_colon_suite("the with items")
        return With(items, body, is_async, line=start.line, column=start.column)

    def _parse_with_item(self) -> WithItem:
        start = self._peek()
        context_expr = self._parse_test()
        optional_vars = None
        if self._match(TokenType.AS):
            optional_vars = self._parse_target_item()
            self._validate_target(optional_vars)
            set_context(optional_vars, ExprContext.STORE)
        return WithItem(context_expr, optional_vars, line=start.line, column=start.column)

    def _parse_try(self) -> Try:
        token = self._advance()
        body = self._parse_colon_suite("try")

        handlers = []
        while self._check(TokenType.EXCEPT):
            except_token = self._advance()
            exc_type = None
            name = None
            if not self._check(TokenType.COLON):
                exc_type = self._parse_test()
                if self._match(TokenType.AS):
                    name = self._consume_identifier("exception name").value
            handler_body = self._parse_colon_suite("except")
            handlers.append(ExceptHandler(exc_type, name, handler_body,
                                          line=except_token.line, column=except_token.column))

        orelse = []
        if self._check(TokenType.ELSE):
            if not handlers:
                raise self._syntax_error("'else' in try statement requires an 'except' clause",
                                         code="P009")
            self._advance()
            orelse = self._parse_colon_suite("else")

        finalbody = []
        if self._match(TokenType.FINALLY):
            finalbody = self._parse_colon_suite("finally")

        if not handlers and not finalbody:
            raise self._syntax_error("Expected 'except' or 'finally' block", code="P009")
        return Try(body, handlers, orelse, finalbody, line=token.line, column=token.column)

    def _parse_match(self) -> Match:
        token = self._advance()
        subject = self._parse_star_expressions()
        self._consume(TokenType.COLON, ":")
        self._consume(TokenType.NEWLINE, "newline")
        if not self._check(TokenType.INDENT):
            raise self._syntax_error("Expected an indented block", code="P009")
        self._advance()

        cases = []
        with self.in_context(ParserContext.MATCH):
            while not self._check(TokenType.DEDENT, TokenType.EOF):
                if self._match(TokenType.NEWLINE):
                    continue
                try:
                    cases.append(self._parse_case())
                except ParseError as error:
                    self._record_error(error)
                    self._synchronize()
        self._match(TokenType.DEDENT)
        return Match(subject, cases, line=token.line, column=token.column)

    def _parse_case(self) -> MatchCase:
        if not self._check_soft_keyword("case"):
            raise create_unexpected_token_error("case", self._peek())
        token = self._advance()

        pattern = self._parse_star_expressions()
        _mark_captures(pattern)
        if self._match(TokenType.AS):
            name = self._consume_identifier("capture name")
            capture = Name(name.value, ExprContext.STORE, line=name.line, column=name.column)
            pattern = NamedExpr(capture, pattern, line=pattern.line, column=pattern.column)

        guard = self._parse_test() if self._match(TokenType.IF) else None
        self._consume(TokenType.COLON, ":")
        with self.in_context(ParserContext.NORMAL):
            body = self._parse_suite()
        return MatchCase(pattern, guard, body, line=token.line, column=token.column)

    # ------------------------------------------------------------------
    # Simple statements
    # ------------------------------------------------------------------

    def _parse_return(self) -> Return:
        token = self._advance()
        if not self.is_in_context(ParserContext.FUNCTION):
            raise self._syntax_error("Return statement outside of function", token, code="P005")
        value = None if self._check(*STATEMENT_END) else self._parse_expression()
        return Return(value, line=token.line, column=token.column)

    def _parse_loop_control(self, node_class, message: str) -> Statement:
        token = self._advance()
        if not self.is_in_context(ParserContext.LOOP):
            raise self._syntax_error(message, token, code="P005")
        return node_class(line=token.line, column=token.column)

    def _parse_raise(self) -> Raise:
        token = self._advance()
        exc = cause = None
        if not self._check(*STATEMENT_END):
            exc = self._parse_test()
            if self._match(TokenType.FROM):
                cause = self._parse_test()
        return Raise(exc, cause, line=token.line, column=token.column)

    def _parse_assert(self) -> Assert:
        token = self._advance()
        test = self._parse_test()
        msg = self._parse_test() if self._match(TokenType.COMMA) else None
        return Assert(test, msg, line=token.line, column=token.column)

    def _parse_del(self) -> Delete:
        token = self._advance()
        targets = []
        while True:
            target = self._parse_atom_expr()
            self._validate_target(target)
            targets.append(set_context(target, ExprContext.DEL))
            if not self._match(TokenType.COMMA) or self._check(*STATEMENT_END):
                break
        return Delete(targets, line=token.line, column=token.column)

    def _parse_name_list(self, node_class) -> Statement:
        token = self._advance()
        names = [self._consume_identifier("name").value]
        while self._match(TokenType.COMMA):
            names.append(self._consume_identifier("name").value)
        return node_class(names, line=token.line, column=token.column)

    def _parse_import(self) -> Import:
        token = self._advance()
        if not self._check(TokenType.IDENTIFIER):
            raise self._syntax_error("Expected module name after 'import'", code="P010")
        names = [self._parse_alias(dotted=True)]
        while self._match(TokenType.COMMA):
            names.append(self._parse_alias(dotted=True))
        return Import(names, line=token.line, column=token.column)

    def _parse_import_from(self) -> ImportFrom:
        token = self._advance()
        level = 0
        while self._check(TokenType.DOT, TokenType.ELLIPSIS):
            level += 3 if self._advance().type is TokenType.ELLIPSIS else 1

        module = None
        if self._check(TokenType.IDENTIFIER):
            module = self._parse_dotted_name()
        elif level == 0:
            raise self._syntax_error("Expected module name after 'from'", code="P010")

        self._consume(TokenType.IMPORT, "import")
        if self._check(TokenType.MULTIPLY):
            star = self._advance()
            names = [Alias("*", line=star.line, column=star.column)]
        elif self._check(TokenType.LEFT_PAREN):
            opener = self._advance()
            names = self._parse_import_items(TokenType.RIGHT_PAREN)
            self._consume_closing(TokenType.RIGHT_PAREN, opener)
        else:
            names = self._parse_import_items(None)
        return ImportFrom(module, names, level, line=token.line, column=token.column)

    def _parse_import_items(self, closing: Optional[TokenType]) -> typing.List[Alias]:
        if not self._check(TokenType.IDENTIFIER):
            raise self._syntax_error("Expected import item after 'import'", code="P010")
        names = [self._parse_alias(dotted=False)]
        while self._match(TokenType.COMMA):
            if closing is not None and self._check(closing):
                break
            names.append(self._parse_alias(dotted=False))
        return names

    def _parse_alias(self, dotted: bool) -> Alias:
        start = self._peek()
        name = self._parse_dotted_name() if dotted else self._consume_identifier("import name").value
        asname = None
        if self._match(TokenType.AS):
            asname = self._consume_identifier("alias name").value
        return Alias(name, asname, line=start.line, column=start.column)

    def _parse_dotted_name(self) -> str:
        parts = [self._consume_identifier("module name").value]
        while self._match(TokenType.DOT):
            parts.append(self._consume_identifier("module name").value)
        return ".".join(parts)


def _is_decorator(expr: Expression) -> bool:
    """Decorators are dotted names, optionally called."""
    if isinstance(expr, Call):
        expr = expr.func
    while isinstance(expr, Attribute):
        expr = expr.value
    return isinstance(expr, Name)


def _mark_captures(pattern: Expression):
    """Stamp Store on the names a case pattern binds; `_` binds nothing."""
    if isinstance(pattern, Name):
        if pattern.id != "_":
            pattern.ctx = ExprContext.STORE
    elif isinstance(pattern, (Tuple, List)):
        for element in pattern.elts:
            _mark_captures(element)
    elif isinstance(pattern, Starred):
        _mark_captures(pattern.value)
    elif isinstance(pattern, BinOp) and pattern.op is Operator.BIT_OR:
        _mark_captures(pattern.left)
        _mark_captures(pattern.right)
    elif isinstance(pattern, Call):
        for argument in pattern.args:
            _mark_captures(argument)
        for keyword in pattern.keywords:
            _mark_captures(keyword.value)
    elif isinstance(pattern, Dict):
        for value in pattern.values:
            _mark_captures(value)
