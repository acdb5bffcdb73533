from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

from gamification.errors import ValidationError
from gamification.models.task import Task


@dataclass(eq=False)
class AllTasksRule:
    '''Every listed task must be finished; duplicates require repeats.'''

    id: int
    organisation_id: int
    name: str
    tasks: list[Task] = field(default_factory=list)
    description: str = ''

    rule_type: ClassVar[str] = 'all_tasks'


@dataclass(eq=False)
class AnyTaskRule:
    '''At least one listed task must be finished.'''

    id: int
    organisation_id: int
    name: str
    tasks: list[Task] = field(default_factory=list)
    description: str = ''

    rule_type: ClassVar[str] = 'any_task'


@dataclass(eq=False)
class PointsRule:
    id: int
    organisation_id: int
    name: str
    points: int
    description: str = ''

    rule_type: ClassVar[str] = 'points'

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValidationError(
                f'Points rule {self.id} needs a non-negative threshold'
            )


@dataclass(eq=False)
class ExpressionRule:
    '''Boolean combination of task ids, e.g. ``1 * (2 + 3)``.'''

    id: int
    organisation_id: int
    name: str
    expression: str
    description: str = ''

    rule_type: ClassVar[str] = 'expression'


TaskRule = Union[AllTasksRule, AnyTaskRule, ExpressionRule]
GoalRule = Union[AllTasksRule, AnyTaskRule, ExpressionRule, PointsRule]

TASK_RULE_TYPES = (AllTasksRule, AnyTaskRule, ExpressionRule)
RULE_TYPES = {
    cls.rule_type: cls
    for cls in (AllTasksRule, AnyTaskRule, PointsRule, ExpressionRule)
}
