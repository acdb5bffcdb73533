from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence

from gamification.engine.rules import check_rule
from gamification.models.actor import Actor
from gamification.models.goal import FinishedGoal, Goal
from gamification.models.rule import GoalRule
from gamification.models.task import FinishedTask

logger = logging.getLogger(__name__)


class GoalState(Enum):
    UNATTEMPTED = 'unattempted'
    COMPLETED_ONCE = 'completed_once'
    COMPLETED_REPEATABLE = 'completed_repeatable'
    BLOCKED = 'blocked'


def goal_state(goal: Goal, previous: Sequence[FinishedGoal]) -> GoalState:
    '''Where an (actor, goal) pair stands given the actor's earlier records.'''
    if not previous:
        return GoalState.UNATTEMPTED
    if not goal.repeatable:
        return GoalState.BLOCKED
    if len(previous) == 1:
        return GoalState.COMPLETED_ONCE
    return GoalState.COMPLETED_REPEATABLE


def last_finished(previous: Sequence[FinishedGoal]) -> datetime | None:
    if not previous:
        return None
    return max(fg.finished_at for fg in previous)


def can_complete(goal: Goal, actor: Actor) -> bool:
    '''Role gate: unrestricted goals are open to everyone.'''
    if not goal.roles:
        return True
    return bool(goal.roles & actor.roles)


def try_complete(
    actor: Actor,
    goal: Goal,
    rule: GoalRule,
    previous: Sequence[FinishedGoal],
    history: Sequence[FinishedTask],
    now: datetime | None = None,
) -> FinishedGoal | None:
    '''Decide whether ``goal`` has just been (re-)completed by ``actor``.

    Returns a new, unsaved FinishedGoal or None. Nothing is appended to the
    actor here; the caller owns that.
    '''
    if actor is None or goal is None or rule is None:
        raise TypeError('actor, goal and rule are required')

    state = goal_state(goal, previous)
    if state is GoalState.BLOCKED:
        logger.debug(f'Goal {goal.id}: already finished and not repeatable')
        return None

    # repeatable goals only count history after the latest completion
    cursor = last_finished(previous)
    if not check_rule(rule, actor, history, cursor):
        return None

    logger.debug(f'Goal {goal.id}: rule {rule.id} satisfied (cursor={cursor})')
    return FinishedGoal(goal_id=goal.id, finished_at=now or datetime.now(timezone.utc))
