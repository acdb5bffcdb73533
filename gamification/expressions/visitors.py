from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from gamification.expressions.nodes import ConstantExpressionNode, NotExpressionNode

if TYPE_CHECKING:
    from gamification.models.task import Task

logger = logging.getLogger(__name__)


class IdCollector:
    '''Collects constant values (task ids) in tree order.'''

    def __init__(self) -> None:
        self.ids: list[int] = []

    def visit_constant(self, node: ConstantExpressionNode) -> None:
        self.ids.append(node.value)

    def visit_not(self, node: NotExpressionNode) -> None:
        pass


class BindTask:
    '''Attaches a task to every constant whose value is the task id.'''

    def __init__(self, task: Task) -> None:
        self.task = task

    def visit_constant(self, node: ConstantExpressionNode) -> None:
        if node.value == self.task.id:
            node.task = self.task
        else:
            logger.debug(
                f'Not binding task {self.task.id} to constant {node.value}'
            )

    def visit_not(self, node: NotExpressionNode) -> None:
        pass


class MarkFinished:
    '''Sets each constant's truth from a set of finished task ids.'''

    def __init__(self, finished_ids: Iterable[int]) -> None:
        self.finished_ids = frozenset(finished_ids)

    def visit_constant(self, node: ConstantExpressionNode) -> None:
        node.truth = node.value in self.finished_ids

    def visit_not(self, node: NotExpressionNode) -> None:
        node.argument.accept(self)
