from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gamification.models.task import Task


class NodeType(Enum):
    CONSTANT = 'constant'
    OR = 'or'
    AND = 'and'
    NOT = 'not'


class ExpressionNodeVisitor(Protocol):
    def visit_constant(self, node: ConstantExpressionNode) -> None:
        pass

    def visit_not(self, node: NotExpressionNode) -> None:
        pass


class ExpressionNode:
    '''Base AST node. Identity is by object reference.'''

    type: NodeType

    def evaluate(self) -> bool:
        raise NotImplementedError

    def accept(self, visitor: ExpressionNodeVisitor) -> None:
        raise NotImplementedError


class ConstantExpressionNode(ExpressionNode):
    type = NodeType.CONSTANT

    def __init__(self, value: int | str) -> None:
        self.value = int(value)
        self.task: Task | None = None
        # Unbound constants evaluate to False
        self.truth: bool | None = None

    def evaluate(self) -> bool:
        return bool(self.truth)

    def accept(self, visitor: ExpressionNodeVisitor) -> None:
        visitor.visit_constant(self)

    def __repr__(self) -> str:
        return f'Constant({self.value})'


class SequenceExpressionNode(ExpressionNode):
    '''n-ary node; children are evaluated in full, no short-circuit.'''

    def __init__(self, *terms: ExpressionNode) -> None:
        self.terms: list[ExpressionNode] = []
        for term in terms:
            self.add(term)

    def add(self, node: ExpressionNode) -> None:
        # adding itself would create a cycle
        if node is self:
            return
        self.terms.append(node)

    def accept(self, visitor: ExpressionNodeVisitor) -> None:
        for term in self.terms:
            term.accept(visitor)

    def __repr__(self) -> str:
        inner = ', '.join(repr(t) for t in self.terms)
        return f'{self.type.name.capitalize()}[{inner}]'


class AndExpressionNode(SequenceExpressionNode):
    type = NodeType.AND

    def evaluate(self) -> bool:
        result = True
        for term in self.terms:
            result &= term.evaluate()
        return result


class OrExpressionNode(SequenceExpressionNode):
    type = NodeType.OR

    def evaluate(self) -> bool:
        result = False
        for term in self.terms:
            result |= term.evaluate()
        return result


class NotExpressionNode(ExpressionNode):
    type = NodeType.NOT

    def __init__(self, argument: ExpressionNode) -> None:
        self.argument = argument

    def evaluate(self) -> bool:
        # Pass-through of the argument, kept as-is (see DESIGN.md)
        return self.argument.evaluate()

    def accept(self, visitor: ExpressionNodeVisitor) -> None:
        visitor.visit_not(self)

    def __repr__(self) -> str:
        return f'Not[{self.argument!r}]'
