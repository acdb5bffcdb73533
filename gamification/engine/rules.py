from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from gamification.expressions import IdCollector, MarkFinished, parse_expression
from gamification.models.actor import Actor
from gamification.models.rule import (
    AllTasksRule,
    AnyTaskRule,
    ExpressionRule,
    GoalRule,
    PointsRule,
    TaskRule,
)
from gamification.models.task import FinishedTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    current: int
    full: int

    @property
    def ratio(self) -> float:
        if self.full <= 0:
            return 1.0
        return min(1.0, max(0.0, self.current / self.full))


def rule_task_ids(rule: TaskRule) -> list[int]:
    '''Task ids referenced by a task rule, in rule order (duplicates kept).'''
    if isinstance(rule, ExpressionRule):
        collector = IdCollector()
        parse_expression(rule.expression).accept(collector)
        return collector.ids
    if isinstance(rule, (AllTasksRule, AnyTaskRule)):
        return [t.id for t in rule.tasks]
    raise TypeError(f'Not a task rule: {rule!r}')


def filter_history(
    rule: TaskRule,
    history: Sequence[FinishedTask],
    cursor: datetime | None = None,
) -> list[FinishedTask]:
    '''Entries for tasks of the rule, strictly after the cursor if given.'''
    wanted = set(rule_task_ids(rule))
    return [
        ft
        for ft in history
        if ft.task.id in wanted and (cursor is None or ft.finished_at > cursor)
    ]


def check_task_rule(
    rule: TaskRule,
    history: Sequence[FinishedTask],
    cursor: datetime | None = None,
) -> bool:
    if rule is None:
        raise TypeError('rule must not be None')
    finished = filter_history(rule, history, cursor)

    if isinstance(rule, AllTasksRule):
        required = Counter(t.name for t in rule.tasks)
        done = Counter(ft.task.name for ft in finished)
        for name, count in required.items():
            if done[name] < count:
                logger.debug(
                    f'Rule {rule.id}: {name} finished {done[name]}/{count} times'
                )
                return False
        return True

    if isinstance(rule, AnyTaskRule):
        return bool(finished)

    if isinstance(rule, ExpressionRule):
        tree = parse_expression(rule.expression)
        tree.accept(MarkFinished(ft.task.id for ft in finished))
        return tree.evaluate()

    raise TypeError(f'Not a task rule: {rule!r}')


def check_points_rule(rule: PointsRule, actor: Actor) -> bool:
    if rule is None or actor is None:
        raise TypeError('rule and actor must not be None')
    return actor.points >= rule.points


def check_rule(
    rule: GoalRule,
    actor: Actor,
    history: Sequence[FinishedTask],
    cursor: datetime | None = None,
) -> bool:
    '''Single entry point over every rule kind.

    Points rules ignore history and cursor; task rules ignore the actor.
    '''
    if isinstance(rule, PointsRule):
        return check_points_rule(rule, actor)
    return check_task_rule(rule, history, cursor)


def rule_progress(
    rule: GoalRule,
    actor: Actor,
    history: Sequence[FinishedTask],
    cursor: datetime | None = None,
) -> Progress:
    if isinstance(rule, PointsRule):
        return Progress(actor.points, rule.points)

    finished = filter_history(rule, history, cursor)
    if isinstance(rule, ExpressionRule):
        ids = set(rule_task_ids(rule))
        done_ids = {ft.task.id for ft in finished}
        return Progress(len(ids & done_ids), len(ids))

    # one unit per distinct required task name
    required = {t.name for t in rule.tasks}
    done = {ft.task.name for ft in finished}
    return Progress(len(required & done), len(required))
