"""
Recursive descent parser for olang.

Converts a token stream into an Abstract Syntax Tree (AST).
"""

from typing import List, Optional

from .tokens import Token, TokenType, SourceSpan
from .ast import (
    ExpressionKind,
    Expression, Literal, Identifier, BinaryOp, Update, VarDecl, Assignment,
    FunctionLiteral, FunctionCall, ListLiteral, IndexAccess,
    IfClause, IfExpr, Loop, Continue, Break, Block, Program,
)
from .errors import (
    error_expected_token,
    error_unexpected_token,
    error_nesting_too_deep,
)


ASSIGNMENT_OPERATORS = (
    TokenType.ASSIGN,
    TokenType.PLUS_ASSIGN,
    TokenType.MINUS_ASSIGN,
    TokenType.STAR_ASSIGN,
    TokenType.SLASH_ASSIGN,
    TokenType.PERCENT_ASSIGN,
)


class Parser:
    """
    Recursive descent parser for olang.

    Usage:
        parser = Parser(tokens)
        program = parser.parse_program()

    The parser implements precedence climbing for binary expressions:
        Lowest:  && ||
                 == != < <= > >=
                 + -
                 * / %
        Highest: ** (left-associative like every other level)
                 postfix indexing
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.AND: 1,
        TokenType.OR: 1,
        TokenType.EQ: 2,
        TokenType.NE: 2,
        TokenType.LT: 2,
        TokenType.LE: 2,
        TokenType.GT: 2,
        TokenType.GE: 2,
        TokenType.PLUS: 3,
        TokenType.MINUS: 3,
        TokenType.STAR: 4,
        TokenType.SLASH: 4,
        TokenType.PERCENT: 4,
        TokenType.DOUBLE_STAR: 5,
    }

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source  # Source text, for diagnostics
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _peek(self, offset: int = 0) -> Token:
        """Peek at token at current position + offset."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _previous(self) -> Token:
        return self.tokens[max(0, self.pos - 1)]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, kind: Optional[ExpressionKind]) -> Token:
        """Consume token of expected type, or raise ExpectedToken."""
        if self._check(token_type):
            return self._advance()
        token = self._current()
        raise error_expected_token(kind, token_type, token,
                                   self._source_line(token))

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _error(self, kind: Optional[ExpressionKind]) -> None:
        token = self._current()
        raise error_unexpected_token(kind, token, self._source_line(token))

    def _source_line(self, token: Token) -> Optional[str]:
        if not self.source:
            return None
        lines = self.source.splitlines()
        line_num = token.span.start.line
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        return SourceSpan(start.span.start, self._previous().span.end)

    # =========================================================================
    # Program
    # =========================================================================

    def parse_program(self) -> Program:
        """Parse all top-level expressions up to EOF."""
        start = self._current()
        expressions = []
        try:
            while not self._is_at_end():
                expressions.append(self.parse_expression())
        except RecursionError:
            token = self._current()
            raise error_nesting_too_deep(token, self._source_line(token)) from None
        end = self._current()
        return Program(
            span=SourceSpan(start.span.start, end.span.end),
            expressions=expressions,
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def parse_expression(self) -> Expression:
        return self._parse_binary_expr(1)

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_postfix_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator
            right = self._parse_binary_expr(precedence + 1)

            left = BinaryOp(
                span=SourceSpan(left.span.start, right.span.end),
                left=left,
                operator=op_token.type,
                right=right
            )

        return left

    def _parse_postfix_expr(self) -> Expression:
        """Parse indexing; the '[' must directly follow the indexed expression."""
        expr = self._parse_primary_expr()

        while self._check(TokenType.LBRACKET) and self._touches_previous():
            self._advance()  # consume '['
            index = self.parse_expression()
            self._consume(TokenType.RBRACKET, ExpressionKind.INDEX)
            expr = IndexAccess(
                span=SourceSpan(expr.span.start, self._previous().span.end),
                object=expr,
                index=index
            )

        return expr

    def _touches_previous(self) -> bool:
        return self._current().span.start.offset == self._previous().span.end.offset

    def _parse_primary_expr(self) -> Expression:
        """Parse primary expressions (literals, identifiers, keywords, groups)."""
        token = self._current()

        if token.type == TokenType.INT_LITERAL:
            self._advance()
            return Literal(span=token.span, value=token.value,
                           literal_type=TokenType.INT_LITERAL)

        if token.type == TokenType.STRING_LITERAL:
            self._advance()
            return Literal(span=token.span, value=token.value,
                           literal_type=TokenType.STRING_LITERAL)

        if token.type in (TokenType.TRUE, TokenType.FALSE):
            self._advance()
            return Literal(span=token.span, value=token.value,
                           literal_type=token.type)

        if token.type == TokenType.NULL:
            self._advance()
            return Literal(span=token.span, value=None,
                           literal_type=TokenType.NULL)

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_expr()

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self.parse_expression()
            self._consume(TokenType.RPAREN, ExpressionKind.GROUPING)
            return expr

        if token.type == TokenType.LBRACE:
            return self._parse_block()

        if token.type == TokenType.LBRACKET:
            return self._parse_list()

        if token.type == TokenType.VAR:
            return self._parse_var_decl()

        if token.type == TokenType.FUN:
            return self._parse_function()

        if token.type == TokenType.IF:
            return self._parse_if()

        if token.type == TokenType.WHILE:
            return self._parse_while()

        if token.type == TokenType.FOR:
            return self._parse_for()

        if token.type == TokenType.LOOP:
            self._advance()
            body = self._parse_block()
            return Loop(span=self._span_from(token), body=body)

        if token.type == TokenType.CONTINUE:
            self._advance()
            return Continue(span=token.span)

        if token.type == TokenType.BREAK:
            self._advance()
            return Break(span=token.span)

        self._error(None)

    def _parse_identifier_expr(self) -> Expression:
        """Disambiguate reference, call, assignment and update by lookahead."""
        name_token = self._advance()
        name = name_token.value
        next_type = self._current().type

        if next_type == TokenType.LPAREN:
            arguments = self._parse_sequence(TokenType.LPAREN, TokenType.RPAREN,
                                             ExpressionKind.CALL)
            return FunctionCall(span=self._span_from(name_token),
                                callee=name, arguments=arguments)

        if next_type in ASSIGNMENT_OPERATORS:
            op = self._advance()
            value = self.parse_expression()
            return Assignment(
                span=SourceSpan(name_token.span.start, value.span.end),
                name=name,
                operator=op.type,
                value=value
            )

        if next_type in (TokenType.INCREMENT, TokenType.DECREMENT):
            op = self._advance()
            return Update(span=self._span_from(name_token), name=name,
                          operator=op.type)

        return Identifier(span=name_token.span, name=name)

    def _parse_sequence(self, open_type: TokenType, close_type: TokenType,
                        kind: ExpressionKind) -> List[Expression]:
        """Parse whitespace-separated expressions between delimiters."""
        self._consume(open_type, kind)
        items = []
        while not self._check(close_type):
            if self._is_at_end():
                self._consume(close_type, kind)
            items.append(self.parse_expression())
        self._consume(close_type, kind)
        return items

    def _parse_block(self) -> Block:
        """Parse { expr* }"""
        start = self._current()
        expressions = self._parse_sequence(TokenType.LBRACE, TokenType.RBRACE,
                                           ExpressionKind.BLOCK)
        return Block(span=self._span_from(start), expressions=expressions)

    def _parse_list(self) -> ListLiteral:
        start = self._current()
        elements = self._parse_sequence(TokenType.LBRACKET, TokenType.RBRACKET,
                                        ExpressionKind.LIST)
        return ListLiteral(span=self._span_from(start), elements=elements)

    def _parse_var_decl(self) -> VarDecl:
        """Parse var name = initializer"""
        start = self._advance()  # consume 'var'
        name = self._consume(TokenType.IDENTIFIER, ExpressionKind.VAR_DECL).value
        self._consume(TokenType.ASSIGN, ExpressionKind.VAR_DECL)
        initializer = self.parse_expression()
        return VarDecl(
            span=SourceSpan(start.span.start, initializer.span.end),
            name=name,
            initializer=initializer
        )

    def _parse_function(self) -> FunctionLiteral:
        """Parse fun(a b c) { body }"""
        start = self._advance()  # consume 'fun'
        self._consume(TokenType.LPAREN, ExpressionKind.FUNCTION)

        parameters = []
        while not self._check(TokenType.RPAREN):
            if not self._check(TokenType.IDENTIFIER):
                if self._is_at_end():
                    self._consume(TokenType.RPAREN, ExpressionKind.FUNCTION)
                self._error(ExpressionKind.FUNCTION)
            parameters.append(self._advance().value)
        self._consume(TokenType.RPAREN, ExpressionKind.FUNCTION)

        body = self._parse_block()
        return FunctionLiteral(span=self._span_from(start),
                               parameters=parameters, body=body)

    def _parse_if(self) -> IfExpr:
        """Parse if test {..} (elif test {..})* (else {..})?"""
        start = self._advance()  # consume 'if'
        clauses = [self._parse_if_clause(start)]

        while self._check(TokenType.ELIF):
            clauses.append(self._parse_if_clause(self._advance()))

        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_block()

        return IfExpr(span=self._span_from(start), clauses=clauses,
                      else_branch=else_branch)

    def _parse_if_clause(self, keyword: Token) -> IfClause:
        test = self.parse_expression()
        if not self._check(TokenType.LBRACE):
            self._consume(TokenType.LBRACE, ExpressionKind.IF)
        body = self._parse_block()
        return IfClause(span=self._span_from(keyword), test=test, body=body)

    def _parse_while(self) -> Loop:
        """Parse while test { body }"""
        start = self._advance()  # consume 'while'
        test = self.parse_expression()
        if not self._check(TokenType.LBRACE):
            self._consume(TokenType.LBRACE, ExpressionKind.LOOP)
        body = self._parse_block()
        return Loop(span=self._span_from(start), body=body, test=test)

    def _parse_for(self) -> Loop:
        """Parse for (init test update) { body }"""
        start = self._advance()  # consume 'for'
        self._consume(TokenType.LPAREN, ExpressionKind.LOOP)
        init = self.parse_expression()
        test = self.parse_expression()
        update = self.parse_expression()
        self._consume(TokenType.RPAREN, ExpressionKind.LOOP)
        body = self._parse_block()
        return Loop(span=self._span_from(start), body=body, init=init,
                    test=test, update=update)


def parse(tokens: List[Token], source: Optional[str] = None) -> Program:
    """
    Convenience function to parse tokens into a program.

    Args:
        tokens: List of tokens from the lexer
        source: Optional source text for diagnostics

    Returns:
        Parsed Program AST

    Raises:
        ParserError: If parsing fails
    """
    parser = Parser(tokens, source)
    return parser.parse_program()
