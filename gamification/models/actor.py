from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from gamification.models.goal import FinishedGoal, Goal
from gamification.models.organisation import Role
from gamification.models.reward import Achievement, Badge, PermanentReward
from gamification.models.task import FinishedTask


@dataclass(eq=False)
class _ActorState:
    '''Balances and collections mutated by reward application.'''

    points: int = 0
    coins: int = 0
    level_index: int = 0
    level_label: str = ''
    rewards: list[PermanentReward] = field(default_factory=list)
    finished_goals: list[FinishedGoal] = field(default_factory=list)

    def finished_goals_for(self, goal: Goal) -> list[FinishedGoal]:
        return [fg for fg in self.finished_goals if fg.goal_id == goal.id]

    @property
    def badges(self) -> list[Badge]:
        return [r for r in self.rewards if isinstance(r, Badge)]

    @property
    def achievements(self) -> list[Achievement]:
        return [r for r in self.rewards if isinstance(r, Achievement)]


@dataclass(eq=False)
class Player(_ActorState):
    id: int = 0
    organisation_id: int = 0
    nickname: str = ''
    reference: str | None = None
    is_active: bool = True
    roles: set[Role] = field(default_factory=set)
    finished_tasks: list[FinishedTask] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        return ('player', self.id)


@dataclass(eq=False)
class PlayerGroup(_ActorState):
    id: int = 0
    organisation_id: int = 0
    name: str = ''
    players: list[Player] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        return ('group', self.id)

    @property
    def roles(self) -> set[Role]:
        return {role for p in self.players for role in p.roles}

    @property
    def finished_tasks(self) -> list[FinishedTask]:
        '''Union of the members' histories, oldest first.'''
        merged = [ft for p in self.players for ft in p.finished_tasks]
        return sorted(merged, key=lambda ft: ft.finished_at)

    def has_member(self, player: Player) -> bool:
        return any(p.id == player.id for p in self.players)


Actor = Union[Player, PlayerGroup]
