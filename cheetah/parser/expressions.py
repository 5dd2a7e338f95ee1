"""
Expression parsing for Cheetah.

One method per precedence level, lowest first:

    expression   tuple / yield
    test         lambda / or_test [if or_test else test]
    or_test      and_test (or and_test)* / Name := or_test
    and_test     not_test (and not_test)*
    not_test     not not_test / comparison
    comparison   bitor (comp_op bitor)*
    bitor        bitxor (| bitxor)*
    bitxor       bitand (^ bitand)*
    bitand       shift (& shift)*
    shift        arith ((<< | >>) arith)*
    arith        term ((+ | -) term)*
    term         factor ((* | / | // | % | @) factor)*
    factor       (+ | - | ~) factor / power
    power        await_expr [** factor]
    await_expr   [await] atom_expr
    atom_expr    atom trailer*
"""

import typing
from typing import Optional

from ..lexer.lexer import tokenize
from ..lexer.tokens import TokenType, NUMBER_TYPES, STRING_TYPES, KEYWORD_TYPES
from .ast_nodes import (
    Expression, ExprContext, Operator, UnaryOperator, BoolOperator, CmpOperator,
    BoolOp, BinOp, UnaryOp, Lambda, IfExp, Dict, Set, ListComp, SetComp, DictComp,
    GeneratorExp, Await, Yield, YieldFrom, Compare, Call, Keyword, Num, Str, Bytes,
    NameConstant, Ellipsis, Attribute, Subscript, Starred, Name, List, Tuple, Slice,
    NamedExpr, Comprehension, LITERAL_NODES, set_context,
)
from .context import ParserContext
from .errors import create_unexpected_token_error, create_unclosed_delimiter_error
from .fstrings import FStringParser, join_string_parts

BINARY_OPERATORS = {
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUB,
    TokenType.MULTIPLY: Operator.MULT,
    TokenType.DIVIDE: Operator.DIV,
    TokenType.FLOOR_DIVIDE: Operator.FLOOR_DIV,
    TokenType.MODULO: Operator.MOD,
    TokenType.AT: Operator.MAT_MULT,
    TokenType.POWER: Operator.POW,
    TokenType.LEFT_SHIFT: Operator.LSHIFT,
    TokenType.RIGHT_SHIFT: Operator.RSHIFT,
    TokenType.BIT_OR: Operator.BIT_OR,
    TokenType.BIT_XOR: Operator.BIT_XOR,
    TokenType.BIT_AND: Operator.BIT_AND,
}

AUGMENTED_ASSIGNMENTS = {
    TokenType.PLUS_ASSIGN: Operator.ADD,
    TokenType.MINUS_ASSIGN: Operator.SUB,
    TokenType.MULTIPLY_ASSIGN: Operator.MULT,
    TokenType.DIVIDE_ASSIGN: Operator.DIV,
    TokenType.FLOOR_DIVIDE_ASSIGN: Operator.FLOOR_DIV,
    TokenType.MODULO_ASSIGN: Operator.MOD,
    TokenType.POWER_ASSIGN: Operator.POW,
    TokenType.MATMUL_ASSIGN: Operator.MAT_MULT,
    TokenType.BIT_AND_ASSIGN: Operator.BIT_AND,
    TokenType.BIT_OR_ASSIGN: Operator.BIT_OR,
    TokenType.BIT_XOR_ASSIGN: Operator.BIT_XOR,
    TokenType.LEFT_SHIFT_ASSIGN: Operator.LSHIFT,
    TokenType.RIGHT_SHIFT_ASSIGN: Operator.RSHIFT,
}

COMPARISON_OPERATORS = {
    TokenType.EQUAL: CmpOperator.EQ,
    TokenType.NOT_EQUAL: CmpOperator.NOT_EQ,
    TokenType.LESS_THAN: CmpOperator.LT,
    TokenType.LESS_EQUAL: CmpOperator.LT_E,
    TokenType.GREATER_THAN: CmpOperator.GT,
    TokenType.GREATER_EQUAL: CmpOperator.GT_E,
    TokenType.IN: CmpOperator.IN,
}

UNARY_OPERATORS = {
    TokenType.PLUS: UnaryOperator.UADD,
    TokenType.MINUS: UnaryOperator.USUB,
    TokenType.BIT_NOT: UnaryOperator.INVERT,
}

SHIFT_OPERATORS = (TokenType.LEFT_SHIFT, TokenType.RIGHT_SHIFT)
ARITH_OPERATORS = (TokenType.PLUS, TokenType.MINUS)
TERM_OPERATORS = (TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.FLOOR_DIVIDE,
                  TokenType.MODULO, TokenType.AT)

# Operators that can only appear between two operands
BINARY_ONLY_OPERATORS = TERM_OPERATORS + (TokenType.POWER,)

# Tokens that may follow a trailing comma in a bare tuple
EXPRESSION_END = (
    TokenType.NEWLINE, TokenType.EOF, TokenType.DEDENT, TokenType.SEMICOLON,
    TokenType.ASSIGN, TokenType.COLON, TokenType.RIGHT_PAREN, TokenType.RIGHT_BRACKET,
    TokenType.RIGHT_BRACE,
) + tuple(AUGMENTED_ASSIGNMENTS)

# Tokens after which `yield` has no value
YIELD_END = (
    TokenType.NEWLINE, TokenType.EOF, TokenType.DEDENT, TokenType.SEMICOLON,
    TokenType.ASSIGN, TokenType.RIGHT_PAREN, TokenType.RIGHT_BRACKET, TokenType.RIGHT_BRACE,
)

CONSTANTS = {TokenType.TRUE: True, TokenType.FALSE: False, TokenType.NONE: None}

EXPRESSION_TARGET_ERRORS = (BinOp, BoolOp, UnaryOp, Compare, IfExp)


class ExpressionParserMixin:
    """Expression productions of the Cheetah parser."""

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        """expression: yield_expr | star_expr (',' star_expr)* [',']"""
        if self._check(TokenType.YIELD):
            return self._parse_yield()
        return self._parse_star_expressions()

    def _parse_star_expressions(self) -> Expression:
        start = self._peek()
        first = self._parse_test_or_star()
        if not self._check(TokenType.COMMA):
            return first

        elements = [first]
        while self._match(TokenType.COMMA):
            if self._check(*EXPRESSION_END):
                break
            if self._check(TokenType.COMMA):
                raise self._syntax_error("Expected expression after comma")
            elements.append(self._parse_test_or_star())
        return Tuple(elements, line=start.line, column=start.column)

    def _parse_test_or_star(self) -> Expression:
        if self._check(TokenType.MULTIPLY):
            star = self._advance()
            return Starred(self._parse_bitor(), line=star.line, column=star.column)
        return self._parse_test()

    def _parse_test(self) -> Expression:
        """test: lambda | or_test ['if' or_test 'else' test]"""
        if self._check(TokenType.LAMBDA):
            return self._parse_lambda()

        expr = self._parse_or_test()
        # Inside comprehensions and case patterns a bare `if` starts a filter or guard
        if self._check(TokenType.IF) and self.innermost_context not in (
                ParserContext.COMPREHENSION, ParserContext.MATCH):
            self._advance()
            test = self._parse_or_test()
            self._consume(TokenType.ELSE, "else")
            orelse = self._parse_test()
            return IfExp(test, expr, orelse, line=expr.line, column=expr.column)
        return expr

    def _parse_yield(self) -> Expression:
        token = self._advance()
        if not self.is_in_context(ParserContext.FUNCTION):
            raise self._syntax_error("Yield statement outside of function", token, code="P005")
        if self._match(TokenType.FROM):
            return YieldFrom(self._parse_test(), line=token.line, column=token.column)
        if self._check(*YIELD_END):
            return Yield(None, line=token.line, column=token.column)
        return Yield(self._parse_star_expressions(), line=token.line, column=token.column)

    def _parse_lambda(self) -> Expression:
        token = self._advance()
        params = self._parse_parameters(TokenType.COLON, allow_annotations=False)
        self._consume(TokenType.COLON, ":")
        body = self._parse_test()
        return Lambda(params, body, line=token.line, column=token.column)

    # ------------------------------------------------------------------
    # Boolean and comparison levels
    # ------------------------------------------------------------------

    def _parse_or_test(self) -> Expression:
        expr = self._parse_and_test()
        if self._check(TokenType.OR):
            values = [expr]
            while self._match(TokenType.OR):
                values.append(self._parse_and_test())
            expr = BoolOp(BoolOperator.OR, values, line=expr.line, column=expr.column)

        if self._check(TokenType.WALRUS):
            walrus = self._advance()
            if not isinstance(expr, Name):
                raise self._syntax_error("Invalid target for walrus operator", walrus, code="P004")
            value = self._parse_or_test()
            expr = NamedExpr(set_context(expr, ExprContext.STORE), value,
                             line=expr.line, column=expr.column)
        return expr

    def _parse_and_test(self) -> Expression:
        expr = self._parse_not_test()
        if self._check(TokenType.AND):
            values = [expr]
            while self._match(TokenType.AND):
                values.append(self._parse_not_test())
            expr = BoolOp(BoolOperator.AND, values, line=expr.line, column=expr.column)
        return expr

    def _parse_not_test(self) -> Expression:
        if self._check(TokenType.NOT):
            token = self._advance()
            return UnaryOp(UnaryOperator.NOT, self._parse_not_test(),
                           line=token.line, column=token.column)
        return self._parse_comparison()

    def _parse_comparison(self) -> Expression:
        left = self._parse_bitor()
        ops, comparators = [], []
        while True:
            if self._check(TokenType.NOT):
                self._advance()
                if not self._match(TokenType.IN):
                    raise self._syntax_error("Expected 'in' after 'not' in comparison")
                op = CmpOperator.NOT_IN
            elif self._check(TokenType.IS):
                self._advance()
                op = CmpOperator.IS_NOT if self._match(TokenType.NOT) else CmpOperator.IS
            elif self._peek().type in COMPARISON_OPERATORS:
                op = COMPARISON_OPERATORS[self._advance().type]
            else:
                break
            ops.append(op)
            comparators.append(self._parse_bitor())

        if ops:
            return Compare(left, ops, comparators, line=left.line, column=left.column)
        return left

    # ------------------------------------------------------------------
    # Binary operator levels
    # ------------------------------------------------------------------

    def _parse_bitor(self) -> Expression:
        return self._parse_left_associative(self._parse_bitxor, (TokenType.BIT_OR,))

    def _parse_bitxor(self) -> Expression:
        return self._parse_left_associative(self._parse_bitand, (TokenType.BIT_XOR,))

    def _parse_bitand(self) -> Expression:
        return self._parse_left_associative(self._parse_shift, (TokenType.BIT_AND,))

    def _parse_shift(self) -> Expression:
        return self._parse_left_associative(self._parse_arith, SHIFT_OPERATORS)

    def _parse_arith(self) -> Expression:
        return self._parse_left_associative(self._parse_term, ARITH_OPERATORS, strict=True)

    def _parse_term(self) -> Expression:
        return self._parse_left_associative(self._parse_factor, TERM_OPERATORS, strict=True)

    def _parse_left_associative(self, operand: typing.Callable[[], Expression],
                                operators: tuple, strict: bool = False) -> Expression:
        left = operand()
        while self._check(*operators):
            op_token = self._advance()
            self._check_operand_follows(op_token, strict)
            right = operand()
            left = BinOp(left, BINARY_OPERATORS[op_token.type], right,
                         line=left.line, column=left.column)
        return left

    def _check_operand_follows(self, op_token, strict: bool = True):
        """Reject `a +` at end of input and `a + * b`."""
        if self._is_at_end():
            raise self._syntax_error("Incomplete expression", op_token,
                                     suggestion="Add an operand after the operator")
        if strict and self._check(*BINARY_ONLY_OPERATORS):
            raise self._syntax_error("Invalid syntax: consecutive operators", self._peek())

    def _parse_factor(self) -> Expression:
        if self._peek().type in UNARY_OPERATORS:
            token = self._advance()
            if self._is_at_end():
                raise self._syntax_error("Incomplete expression", token)
            return UnaryOp(UNARY_OPERATORS[token.type], self._parse_factor(),
                           line=token.line, column=token.column)
        return self._parse_power()

    def _parse_power(self) -> Expression:
        base = self._parse_await()
        if self._check(TokenType.POWER):
            op_token = self._advance()
            self._check_operand_follows(op_token)
            # Right-associative: the exponent may itself be a power
            exponent = self._parse_factor()
            return BinOp(base, Operator.POW, exponent, line=base.line, column=base.column)
        return base

    def _parse_await(self) -> Expression:
        if self._check(TokenType.AWAIT):
            token = self._advance()
            if not self.is_in_context(ParserContext.FUNCTION):
                raise self._syntax_error("'await' outside function", token, code="P005")
            return Await(self._parse_atom_expr(), line=token.line, column=token.column)
        return self._parse_atom_expr()

    # ------------------------------------------------------------------
    # Trailers
    # ------------------------------------------------------------------

    def _parse_atom_expr(self) -> Expression:
        expr = self._parse_atom()
        while True:
            if self._check(TokenType.LEFT_PAREN):
                opener = self._advance()
                args, keywords = self._parse_arguments(opener, "Expected comma between arguments")
                expr = Call(expr, args, keywords, line=expr.line, column=expr.column)
            elif self._check(TokenType.LEFT_BRACKET):
                expr = self._parse_subscript(expr)
            elif self._check(TokenType.DOT):
                self._advance()
                name = self._peek()
                # Keywords are fine as attribute names after a dot
                if name.type is not TokenType.IDENTIFIER and name.type not in KEYWORD_TYPES:
                    raise create_unexpected_token_error("attribute name", name)
                self._advance()
                expr = Attribute(expr, name.lexeme, line=expr.line, column=expr.column)
            else:
                return expr

    def _parse_arguments(self, opener, missing_comma: str) -> typing.Tuple[list, list]:
        """
        Parse a call or class-header argument list after its `(`.

        Returns (args, keywords). `*iterable` becomes a Starred argument,
        `**mapping` a Keyword with no name, and a lone generator expression
        may appear without its own parentheses.
        """
        args, keywords = [], []
        with self.in_context(ParserContext.NORMAL):
            while not self._check(TokenType.RIGHT_PAREN):
                self._check_unclosed(TokenType.RIGHT_PAREN, opener)
                if self._check(TokenType.COMMA):
                    raise self._syntax_error("Expected expression between commas", code="P008")

                token = self._peek()
                if self._match(TokenType.POWER):
                    keywords.append(Keyword(None, self._parse_test(),
                                            line=token.line, column=token.column))
                elif self._match(TokenType.MULTIPLY):
                    args.append(Starred(self._parse_test(), line=token.line, column=token.column))
                elif self._check(TokenType.IDENTIFIER) and self._check_next(TokenType.ASSIGN):
                    self._advance()
                    self._advance()
                    keywords.append(Keyword(token.value, self._parse_test(),
                                            line=token.line, column=token.column))
                else:
                    if keywords:
                        raise self._syntax_error("Positional argument after keyword argument",
                                                 token, code="P008")
                    value = self._parse_test()
                    if self._check_comprehension_start():
                        generators = self._parse_comprehensions()
                        value = GeneratorExp(value, generators, line=value.line, column=value.column)
                        if args or self._check(TokenType.COMMA):
                            raise self._syntax_error("Generator expression must be parenthesized",
                                                     token, code="P008")
                    args.append(value)

                if self._match(TokenType.COMMA):
                    continue
                if not self._check(TokenType.RIGHT_PAREN, TokenType.EOF):
                    self._check_closable(TokenType.RIGHT_PAREN, opener)
                    raise self._syntax_error(missing_comma, self._peek(), code="P008")
                break
        self._consume_closing(TokenType.RIGHT_PAREN, opener)
        return args, keywords

    def _parse_subscript(self, value: Expression) -> Expression:
        opener = self._advance()
        with self.in_context(ParserContext.NORMAL):
            self._check_unclosed(TokenType.RIGHT_BRACKET, opener)
            items = [self._parse_slice_item()]
            is_tuple = False
            while self._match(TokenType.COMMA):
                is_tuple = True
                if self._check(TokenType.RIGHT_BRACKET):
                    break
                items.append(self._parse_slice_item())
        self._consume_closing(TokenType.RIGHT_BRACKET, opener)

        index = items[0]
        if is_tuple:
            index = Tuple(items, line=items[0].line, column=items[0].column)
        return Subscript(value, index, line=value.line, column=value.column)

    def _parse_slice_item(self) -> Expression:
        start = self._peek()
        lower = None
        if not self._check(TokenType.COLON):
            lower = self._parse_test_or_star()
            if not self._check(TokenType.COLON):
                return lower
        self._advance()

        upper = None
        if not self._check(TokenType.COLON, TokenType.COMMA, TokenType.RIGHT_BRACKET):
            upper = self._parse_test()
        step = None
        if self._match(TokenType.COLON):
            if not self._check(TokenType.COMMA, TokenType.RIGHT_BRACKET):
                step = self._parse_test()
        return Slice(lower, upper, step, line=start.line, column=start.column)

    # ------------------------------------------------------------------
    # Atoms
    # ------------------------------------------------------------------

    def _parse_atom(self) -> Expression:
        token = self._peek()
        token_type = token.type

        if token_type is TokenType.IDENTIFIER:
            self._advance()
            return Name(token.value, line=token.line, column=token.column)
        if token_type in NUMBER_TYPES:
            self._advance()
            return Num(token.value, line=token.line, column=token.column)
        if token_type in STRING_TYPES:
            return self._parse_strings()
        if token_type in CONSTANTS:
            self._advance()
            return NameConstant(CONSTANTS[token_type], line=token.line, column=token.column)
        if token_type is TokenType.ELLIPSIS:
            self._advance()
            return Ellipsis(line=token.line, column=token.column)
        if token_type is TokenType.LEFT_PAREN:
            return self._parse_parenthesized()
        if token_type is TokenType.LEFT_BRACKET:
            return self._parse_list_display()
        if token_type is TokenType.LEFT_BRACE:
            return self._parse_brace_display()
        if token_type is TokenType.INVALID:
            raise self._syntax_error(f"Invalid token: {token.value}", token)
        raise create_unexpected_token_error("expression", token)

    def _parse_strings(self) -> Expression:
        """Adjacent string literals are concatenated into one node."""
        first = self._peek()
        tokens = []
        while self._check(*STRING_TYPES):
            tokens.append(self._advance())

        byte_flags = [token.type is TokenType.BYTES for token in tokens]
        if any(byte_flags):
            if not all(byte_flags):
                raise self._syntax_error("Cannot mix bytes and nonbytes literals", first)
            return Bytes(b"".join(token.value for token in tokens),
                         line=first.line, column=first.column)

        parts = []
        for token in tokens:
            if token.type is TokenType.FORMAT_STRING:
                parts.extend(FStringParser(token, self._parse_fstring_field).parse())
            else:
                parts.append(Str(token.value, line=token.line, column=token.column))
        return join_string_parts(parts, first.line, first.column)

    def _parse_fstring_field(self, text: str) -> Expression:
        """
        Parse the expression of one f-string replacement field.

        The text is wrapped in parentheses so it may span lines and start
        with blanks. Positions in the result are relative to the wrapped text.
        """
        wrapped = f"({text})"
        tokens, lexer_errors = tokenize(wrapped)
        if lexer_errors:
            raise self._syntax_error(lexer_errors[0].message)
        parser = type(self)(tokens, wrapped, self.context_stack)
        return parser.parse_expression_only()

    def _parse_parenthesized(self) -> Expression:
        opener = self._advance()
        if self._match(TokenType.RIGHT_PAREN):
            return Tuple([], line=opener.line, column=opener.column)

        with self.in_context(ParserContext.NORMAL):
            self._check_unclosed(TokenType.RIGHT_PAREN, opener)
            if self._check(TokenType.YIELD):
                expr = self._parse_yield()
                self._consume_closing(TokenType.RIGHT_PAREN, opener)
                return expr

            first = self._parse_test_or_star()
            if self._check_comprehension_start():
                generators = self._parse_comprehensions()
                self._consume_closing(TokenType.RIGHT_PAREN, opener)
                return GeneratorExp(first, generators, line=opener.line, column=opener.column)
            if not self._check(TokenType.COMMA):
                self._consume_closing(TokenType.RIGHT_PAREN, opener)
                return first

            elements = self._parse_display_tail(first, TokenType.RIGHT_PAREN, opener)
        return Tuple(elements, line=opener.line, column=opener.column)

    def _parse_list_display(self) -> Expression:
        opener = self._advance()
        if self._match(TokenType.RIGHT_BRACKET):
            return List([], line=opener.line, column=opener.column)

        with self.in_context(ParserContext.NORMAL):
            self._check_unclosed(TokenType.RIGHT_BRACKET, opener)
            first = self._parse_test_or_star()
            if self._check_comprehension_start():
                generators = self._parse_comprehensions()
                self._consume_closing(TokenType.RIGHT_BRACKET, opener)
                return ListComp(first, generators, line=opener.line, column=opener.column)
            elements = self._parse_display_tail(first, TokenType.RIGHT_BRACKET, opener)
        return List(elements, line=opener.line, column=opener.column)

    def _parse_brace_display(self) -> Expression:
        opener = self._advance()
        if self._match(TokenType.RIGHT_BRACE):
            return Dict([], [], line=opener.line, column=opener.column)

        with self.in_context(ParserContext.NORMAL):
            self._check_unclosed(TokenType.RIGHT_BRACE, opener)
            if self._check(TokenType.POWER):
                key, value = self._parse_dict_item()
                return self._parse_dict_tail(key, value, opener)

            first = self._parse_test_or_star()
            if self._match(TokenType.COLON):
                value = self._parse_test()
                if self._check_comprehension_start():
                    generators = self._parse_comprehensions()
                    self._consume_closing(TokenType.RIGHT_BRACE, opener)
                    return DictComp(first, value, generators, line=opener.line, column=opener.column)
                return self._parse_dict_tail(first, value, opener)

            if self._check_comprehension_start():
                generators = self._parse_comprehensions()
                self._consume_closing(TokenType.RIGHT_BRACE, opener)
                return SetComp(first, generators, line=opener.line, column=opener.column)
            elements = self._parse_display_tail(first, TokenType.RIGHT_BRACE, opener)
        return Set(elements, line=opener.line, column=opener.column)

    def _parse_dict_item(self) -> typing.Tuple[Optional[Expression], Expression]:
        if self._match(TokenType.POWER):
            return None, self._parse_bitor()
        key = self._parse_test()
        self._consume(TokenType.COLON, ":")
        return key, self._parse_test()

    def _parse_dict_tail(self, key, value, opener) -> Expression:
        keys, values = [key], [value]
        while self._match(TokenType.COMMA):
            if self._check(TokenType.RIGHT_BRACE):
                break
            self._check_unclosed(TokenType.RIGHT_BRACE, opener)
            key, value = self._parse_dict_item()
            keys.append(key)
            values.append(value)
        self._consume_closing(TokenType.RIGHT_BRACE, opener)
        return Dict(keys, values, line=opener.line, column=opener.column)

    def _parse_display_tail(self, first: Expression, closing: TokenType, opener) -> typing.List[Expression]:
        """Collect `, item` pairs after the first element and the closing bracket."""
        elements = [first]
        while self._match(TokenType.COMMA):
            if self._check(closing):
                break
            self._check_unclosed(closing, opener)
            if self._check(TokenType.COMMA):
                raise self._syntax_error("Expected expression after comma")
            elements.append(self._parse_test_or_star())
        self._consume_closing(closing, opener)
        return elements

    def _check_unclosed(self, closing: TokenType, opener):
        if self._check(TokenType.EOF):
            raise create_unclosed_delimiter_error(closing, opener)

    # ------------------------------------------------------------------
    # Comprehensions and targets
    # ------------------------------------------------------------------

    def _check_comprehension_start(self) -> bool:
        return self._check(TokenType.FOR) or (
            self._check(TokenType.ASYNC) and self._check_next(TokenType.FOR))

    def _parse_comprehensions(self) -> typing.List[Comprehension]:
        """Parse one or more `[async] for target in iter (if cond)*` clauses."""
        generators = []
        with self.in_context(ParserContext.COMPREHENSION):
            while self._check_comprehension_start():
                start = self._peek()
                is_async = self._match(TokenType.ASYNC)
                self._consume(TokenType.FOR, "for")
                target = self._parse_for_target()
                self._validate_target(target)
                self._consume(TokenType.IN, "in")
                iterable = self._parse_or_test()
                conditions = []
                while self._match(TokenType.IF):
                    conditions.append(self._parse_or_test())
                generators.append(Comprehension(set_context(target, ExprContext.STORE), iterable,
                                                conditions, is_async,
                                                line=start.line, column=start.column))
        return generators

    def _parse_for_target(self) -> Expression:
        """
        Parse the target of a `for` header or comprehension clause.

        Stops before `in`, which a full expression parse would swallow as
        a comparison.
        """
        start = self._peek()
        first = self._parse_target_item()
        if not self._check(TokenType.COMMA):
            return first
        elements = [first]
        while self._match(TokenType.COMMA):
            if self._check(TokenType.IN):
                break
            elements.append(self._parse_target_item())
        return Tuple(elements, line=start.line, column=start.column)

    def _parse_target_item(self) -> Expression:
        if self._check(TokenType.MULTIPLY):
            star = self._advance()
            return Starred(self._parse_atom_expr(), line=star.line, column=star.column)
        return self._parse_atom_expr()

    def _validate_target(self, target: Expression):
        """Raise unless `target` can be assigned to."""
        if isinstance(target, (Name, Attribute, Subscript)):
            return
        if isinstance(target, (Tuple, List)):
            for element in target.elts:
                self._validate_target(element)
            return
        if isinstance(target, Starred):
            self._validate_target(target.value)
            return

        if isinstance(target, LITERAL_NODES):
            message = "Cannot assign to literal"
        elif isinstance(target, EXPRESSION_TARGET_ERRORS):
            message = "Cannot assign to expression"
        elif isinstance(target, Call):
            message = "Cannot assign to function call"
        else:
            message = "Invalid assignment target"
        raise self._syntax_error(message, target, code="P004")
