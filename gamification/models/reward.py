from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from gamification.errors import ValidationError


@dataclass(eq=False)
class Badge:
    id: int
    organisation_id: int
    name: str
    description: str = ''
    icon_url: str | None = None

    reward_type: ClassVar[str] = 'badge'


@dataclass(eq=False)
class Achievement:
    id: int
    organisation_id: int
    name: str
    description: str = ''
    icon_url: str | None = None

    reward_type: ClassVar[str] = 'achievement'


class _AmountReward:
    amount: int
    id: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValidationError(
                f'{type(self).__name__} reward {self.id} has negative amount'
            )


@dataclass(eq=False)
class Points(_AmountReward):
    id: int
    organisation_id: int
    amount: int

    reward_type: ClassVar[str] = 'points'


@dataclass(eq=False)
class Coins(_AmountReward):
    id: int
    organisation_id: int
    amount: int

    reward_type: ClassVar[str] = 'coins'


@dataclass(eq=False)
class ReceiveLevel:
    id: int
    organisation_id: int
    level_index: int
    level_label: str = ''

    reward_type: ClassVar[str] = 'level'

    def __post_init__(self) -> None:
        if self.level_index < 0:
            raise ValidationError(f'Level reward {self.id} has negative index')


PermanentReward = Union[Badge, Achievement]
VolatileReward = Union[Points, Coins, ReceiveLevel]
Reward = Union[Badge, Achievement, Points, Coins, ReceiveLevel]

PERMANENT_REWARD_TYPES = (Badge, Achievement)
REWARD_TYPES = {
    cls.reward_type: cls for cls in (Badge, Achievement, Points, Coins, ReceiveLevel)
}
