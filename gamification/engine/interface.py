from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from gamification.models.actor import Actor, Player, PlayerGroup
from gamification.models.goal import FinishedGoal, Goal
from gamification.models.reward import Reward
from gamification.models.rule import GoalRule, PointsRule, TaskRule
from gamification.models.task import FinishedTask, Task


@runtime_checkable
class GamificationStore(Protocol):
    '''Read access the engine needs from the surrounding persistence layer.

    Every call returns a fresh snapshot; the engine never keeps references
    to the returned collections between events.
    '''

    def finished_tasks(self, actor: Actor) -> Sequence[FinishedTask]:
        pass

    def finished_goals(self, actor: Actor, goal: Goal) -> Sequence[FinishedGoal]:
        pass

    def goals_referencing_rule(self, rule: GoalRule) -> Iterable[Goal]:
        pass

    def points_rules(self, organisation_id: int) -> Iterable[PointsRule]:
        pass

    def groups_containing(self, player: Player) -> Iterable[PlayerGroup]:
        pass

    def rules_referencing_task(self, task: Task) -> Iterable[TaskRule]:
        pass

    def rule(self, rule_id: int) -> GoalRule:
        pass

    def reward(self, reward_id: int) -> Reward:
        pass
