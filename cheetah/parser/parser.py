"""
Cheetah Parser Implementation

A recursive-descent parser over the lexer's token list. Expressions use one
function per precedence level (see expressions.py), statements one function
per production (see statements.py). This module holds the driver: the token
cursor, the context stack, error recording and synchronization.

Author: xwest
"""

import logging
import re
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from ..lexer.config import LexerConfig
from ..lexer.lexer import tokenize
from ..lexer.tokens import Token, TokenType, OPENING_BRACKETS, spelling
from .ast_nodes import Module, Expression
from .context import ParserContext
from .errors import (
    ParseError, ParseWarning, ParseFailure, UNCLOSED_MESSAGES,
    create_unexpected_token_error, create_unclosed_delimiter_error,
    create_syntax_error,
)
from .expressions import ExpressionParserMixin
from .statements import StatementParserMixin

LOGGER = logging.getLogger(__name__)

# Tokens after which an unclosed bracket can no longer be closed
BLOCK_BOUNDARIES = (TokenType.EOF, TokenType.NEWLINE, TokenType.INDENT, TokenType.DEDENT)


class Parser(StatementParserMixin, ExpressionParserMixin):
    """
    Cheetah recursive-descent parser.

    Consumes the token list with one token of lookahead and remembers the
    previous token for error positions. Errors abort the current statement
    only; the parser then skips to the next NEWLINE and carries on.
    """

    def __init__(self, tokens: Iterable[Token], source: Optional[str] = None,
                 contexts: Optional[List[ParserContext]] = None):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: Tokens from the lexer, normally ending with EOF
            source: Original source text, used to attach snippets to errors
            contexts: Enclosing contexts, for sub-parsers (f-string fields)
        """
        self.tokens: List[Token] = list(tokens)
        if not self.tokens or self.tokens[-1].type is not TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            line = last.line if last else 1
            column = last.column + len(last.lexeme) if last else 1
            self.tokens.append(Token(TokenType.EOF, "", line, column))

        self.current = 0
        self.errors: List[ParseError] = []
        self.warnings: List[ParseWarning] = []
        self.context_stack: List[ParserContext] = list(contexts or [ParserContext.NORMAL])
        self.indent_level = 0
        self._source_lines = re.split(r"\r\n|\r|\n", source) if source is not None else None

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def parse(self) -> Module:
        """
        Parse the token stream into a Module.

        Raises:
            ParseFailure: if any syntax error was recorded
        """
        body = []
        while not self._is_at_end():
            if self._match(TokenType.NEWLINE):
                continue
            if self._check(TokenType.DEDENT):
                # Left over from a block whose header failed to parse
                self._advance()
                continue
            body.extend(self._parse_statement_recovering())

        LOGGER.debug("Parsed %d top-level statement(s), %d error(s), %d warning(s)",
                     len(body), len(self.errors), len(self.warnings))
        if self.errors:
            raise ParseFailure(self.errors, self.warnings)
        return Module(body, line=1, column=1)

    def parse_expression_only(self) -> Expression:
        """Parse the whole token stream as a single expression."""
        while self._match(TokenType.NEWLINE):
            pass
        expr = self._parse_expression()
        while self._match(TokenType.NEWLINE):
            pass
        if not self._is_at_end():
            raise create_unexpected_token_error("end of expression", self._peek())
        return expr

    def _parse_statement_recovering(self) -> List:
        """Parse one statement; on error record it, synchronize and return nothing."""
        try:
            return [self._parse_statement()]
        except ParseError as error:
            self._record_error(error)
            self._synchronize()
            return []

    def _record_error(self, error: ParseError):
        if error.diagnostic.snippet is None and self._source_lines is not None:
            if 1 <= error.line <= len(self._source_lines):
                error.diagnostic.snippet = self._source_lines[error.line - 1]
        self.errors.append(error)

    def _warn(self, message: str, token: Token, suggestion: Optional[str] = None):
        warning = ParseWarning(message, token.line, token.column, suggestion)
        LOGGER.debug("Parse warning: %s", warning)
        self.warnings.append(warning)

    def _synchronize(self):
        """
        Skip to the start of the next statement.

        Advances past the next NEWLINE (or stops at EOF / a DEDENT that closes
        the enclosing block). If an indented block follows, it belonged to
        the statement that failed and is skipped as well.
        """
        start = self._peek()
        if self._check(TokenType.INDENT):
            self._skip_block()
        else:
            while not self._check(TokenType.NEWLINE, TokenType.EOF, TokenType.DEDENT):
                self._advance()
            self._match(TokenType.NEWLINE)
            if self._check(TokenType.INDENT):
                self._skip_block()
        LOGGER.debug("Synchronized from %s to %s", start, self._peek())

    def _skip_block(self):
        depth = 0
        while not self._is_at_end():
            token = self._advance()
            if token.type is TokenType.INDENT:
                depth += 1
            elif token.type is TokenType.DEDENT:
                depth -= 1
                if depth == 0:
                    return

    # ------------------------------------------------------------------
    # Context stack
    # ------------------------------------------------------------------

    def push_context(self, context: ParserContext):
        self.context_stack.append(context)

    def pop_context(self):
        # The base context is never popped
        if len(self.context_stack) > 1:
            self.context_stack.pop()

    def is_in_context(self, context: ParserContext) -> bool:
        return context in self.context_stack

    @property
    def innermost_context(self) -> ParserContext:
        return self.context_stack[-1]

    @contextmanager
    def in_context(self, context: ParserContext) -> Iterator[None]:
        """Push a context for the duration of a with-block."""
        self.push_context(context)
        try:
            yield
        finally:
            self.pop_context()

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _match(self, *token_types: TokenType) -> bool:
        """Consume the current token if it has one of the given types."""
        if self._check(*token_types):
            self._advance()
            return True
        return False

    def _check(self, *token_types: TokenType) -> bool:
        """Check if current token has one of the given types."""
        return self._peek().type in token_types

    def _check_next(self, *token_types: TokenType) -> bool:
        return self._peek_next().type in token_types

    def _check_soft_keyword(self, word: str) -> bool:
        token = self._peek()
        return token.type is TokenType.IDENTIFIER and token.value == word

    def _advance(self) -> Token:
        """Consume current token and return it."""
        token = self._peek()
        if token.type is not TokenType.EOF:
            self.current += 1
            if token.type is TokenType.INDENT:
                self.indent_level += 1
            elif token.type is TokenType.DEDENT:
                self.indent_level -= 1
        return token

    def _is_at_end(self) -> bool:
        return self._peek().type is TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _peek_next(self, offset: int = 1) -> Token:
        return self.tokens[min(self.current + offset, len(self.tokens) - 1)]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1] if self.current > 0 else self.tokens[0]

    def _consume(self, token_type: TokenType, expected: Optional[str] = None,
                 suggestion: Optional[str] = None) -> Token:
        """Consume a token of the given type or raise an unexpected-token error."""
        if self._check(token_type):
            return self._advance()
        raise create_unexpected_token_error(expected or spelling(token_type), self._peek(),
                                            suggestion=suggestion)

    def _consume_closing(self, closing: TokenType, opener: Token) -> Token:
        """Consume the bracket that closes `opener`, reporting it unclosed when none can."""
        if self._check(closing):
            return self._advance()
        self._check_closable(closing, opener)
        raise create_unexpected_token_error(spelling(closing), self._peek(),
                                            suggestion=UNCLOSED_MESSAGES[closing].replace(
                                                "Unclosed", "Close the"))

    def _check_closable(self, closing: TokenType, opener: Token):
        """
        Raise an unclosed-delimiter error if `opener` can no longer be closed.

        That is the case at a block boundary, or when no bracket left in the
        stream balances it. The lexer joins lines inside brackets, so a
        bracket left open swallows the following lines as well.
        """
        if self._check(*BLOCK_BOUNDARIES):
            raise create_unclosed_delimiter_error(closing, opener)
        partner = OPENING_BRACKETS[opener.lexeme]
        depth = 1
        for token in self.tokens[self.current:]:
            if token.lexeme == opener.lexeme:
                depth += 1
            elif token.lexeme == partner:
                depth -= 1
                if depth == 0:
                    return
        raise create_unclosed_delimiter_error(closing, opener)

    def _consume_identifier(self, expected: str = "identifier") -> Token:
        if self._check(TokenType.IDENTIFIER):
            return self._advance()
        raise create_unexpected_token_error(expected, self._peek())

    def _syntax_error(self, message: str, token=None, code: str = "P007",
                      suggestion: Optional[str] = None) -> ParseError:
        """Build an InvalidSyntax error at a token or node (default: the current token)."""
        token = token or self._peek()
        return create_syntax_error(message, token.line, token.column, code=code,
                                   suggestion=suggestion)


def parse(tokens: Iterable[Token], source: Optional[str] = None) -> Module:
    """
    Parse a token stream into a Module.

    Raises:
        ParseFailure: carrying every recorded ParseError
    """
    return Parser(tokens, source).parse()


def parse_source(source: str, config: Optional[LexerConfig] = None) -> Module:
    """Lex and parse source text in one step."""
    tokens, lexer_errors = tokenize(source, config)
    parser = Parser(tokens, source)
    try:
        module = parser.parse()
    except ParseFailure as failure:
        raise ParseFailure(failure.errors, failure.warnings, lexer_errors) from None
    if lexer_errors:
        raise ParseFailure([], parser.warnings, lexer_errors)
    return module


def parse_expression_source(source: str, contexts: Optional[List[ParserContext]] = None) -> Expression:
    """Lex and parse a single expression."""
    tokens, lexer_errors = tokenize(source)
    if lexer_errors:
        raise ParseFailure([], lexer_errors=lexer_errors)
    parser = Parser(tokens, source, contexts)
    try:
        return parser.parse_expression_only()
    except ParseError as error:
        raise ParseFailure([error]) from error
