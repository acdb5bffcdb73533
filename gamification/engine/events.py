from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from gamification.models.actor import Actor
from gamification.models.goal import FinishedGoal
from gamification.models.reward import Reward
from gamification.models.task import FinishedTask

EventType = Literal['goal_completed', 'reward_granted']


@dataclass(frozen=True)
class GoalCompletedEvent:
    actor: Actor
    finished_goal: FinishedGoal
    cascade_depth: int = 0

    @property
    def type(self) -> EventType:
        return 'goal_completed'


@dataclass(frozen=True)
class RewardGrantedEvent:
    actor: Actor
    reward: Reward
    goal_id: int

    @property
    def type(self) -> EventType:
        return 'reward_granted'


@dataclass
class CompletionOutcome:
    '''Everything one task completion produced, in application order.'''

    finished_task: FinishedTask
    completed_goals: list[GoalCompletedEvent] = field(default_factory=list)
    granted_rewards: list[RewardGrantedEvent] = field(default_factory=list)

    @property
    def touched_actors(self) -> list[Actor]:
        seen: dict[tuple[str, int], Actor] = {}
        for ev in (*self.completed_goals, *self.granted_rewards):
            seen.setdefault(ev.actor.key, ev.actor)
        return list(seen.values())
