from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from gamification.models.organisation import Role


@dataclass(eq=False)
class Goal:
    id: int
    organisation_id: int
    name: str
    rule_id: int
    repeatable: bool = False
    group_goal: bool = False
    roles: set[Role] = field(default_factory=set)
    reward_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class FinishedGoal:
    goal_id: int
    finished_at: datetime
    id: int | None = None
