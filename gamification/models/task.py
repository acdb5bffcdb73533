from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from gamification.models.organisation import Role


@dataclass(eq=False)
class Task:
    id: int
    organisation_id: int
    name: str
    description: str = ''
    tradeable: bool = False
    roles: set[Role] = field(default_factory=set)


@dataclass(frozen=True)
class FinishedTask:
    task: Task
    finished_at: datetime
    player_id: int | None = None
    id: int | None = None
