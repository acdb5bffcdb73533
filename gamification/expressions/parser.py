from __future__ import annotations

from collections import deque
from typing import Iterable

from gamification.errors import ParseError
from gamification.expressions.nodes import (
    AndExpressionNode,
    ConstantExpressionNode,
    ExpressionNode,
    NodeType,
    OrExpressionNode,
)
from gamification.expressions.tokenizer import EPSILON, Token, TokenType, tokenize


class Parser:
    '''LL(1) parser for rule expressions.

    Grammar::

        expression := term ('+' term)*      # '+' is OR
        term       := factor ('*' factor)*  # '*' is AND
        factor     := '(' expression ')' | NUMBER

    Repeated operators of the same kind collapse into one n-ary node, so
    ``1 + 2 + 3`` parses to a single OR node with three children.
    '''

    def __init__(self) -> None:
        self._tokens: deque[Token] = deque()
        self._lookahead: Token = EPSILON

    def parse(self, text: str) -> ExpressionNode:
        return self.parse_tokens(tokenize(text))

    def parse_tokens(self, tokens: Iterable[Token]) -> ExpressionNode:
        # copy, the caller's sequence is left untouched
        self._tokens = deque(tokens)
        if not self._tokens:
            raise ParseError('No tokens provided')
        self._lookahead = self._tokens[0]

        expression = self._expression()
        if self._lookahead.type is not TokenType.EPSILON:
            raise ParseError('Unexpected symbol %s found', self._lookahead.sequence)
        return expression

    def _next_token(self) -> None:
        self._tokens.popleft()
        self._lookahead = self._tokens[0] if self._tokens else EPSILON

    def _expression(self) -> ExpressionNode:
        expr = self._term()
        while self._lookahead.type is TokenType.OR:
            if expr.type is not NodeType.OR:
                expr = OrExpressionNode(expr)
            self._next_token()
            expr.add(self._term())  # type: ignore[attr-defined]
        return expr

    def _term(self) -> ExpressionNode:
        expr = self._factor()
        while self._lookahead.type is TokenType.AND:
            if expr.type is not NodeType.AND:
                expr = AndExpressionNode(expr)
            self._next_token()
            expr.add(self._factor())  # type: ignore[attr-defined]
        return expr

    def _factor(self) -> ExpressionNode:
        if self._lookahead.type is TokenType.OPEN_BRACKET:
            self._next_token()
            expr = self._expression()
            if self._lookahead.type is not TokenType.CLOSE_BRACKET:
                raise ParseError('Closing bracket expected')
            self._next_token()
            return expr

        if self._lookahead.type is TokenType.NUMBER:
            node = ConstantExpressionNode(self._lookahead.sequence)
            self._next_token()
            return node

        if self._lookahead.type is TokenType.EPSILON:
            raise ParseError('Unexpected end of input')
        raise ParseError('Unexpected symbol %s found', self._lookahead.sequence)


def parse_expression(text: str) -> ExpressionNode:
    return Parser().parse(text)
