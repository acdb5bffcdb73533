from __future__ import annotations

import logging

from gamification.models.actor import Actor
from gamification.models.reward import (
    Achievement,
    Badge,
    Coins,
    Points,
    ReceiveLevel,
    Reward,
)

logger = logging.getLogger(__name__)


def grant(reward: Reward, actor: Actor) -> None:
    '''Apply one reward to an actor.

    Permanent rewards are appended without a duplicate check; the engine
    guarantees one grant per reward and actor within a completion event.
    The points cascade is the engine's job, not this function's.
    '''
    if reward is None or actor is None:
        raise TypeError('reward and actor must not be None')

    if isinstance(reward, (Badge, Achievement)):
        actor.rewards.append(reward)
    elif isinstance(reward, Points):
        actor.points += reward.amount
    elif isinstance(reward, Coins):
        actor.coins += reward.amount
    elif isinstance(reward, ReceiveLevel):
        actor.level_index = reward.level_index
        actor.level_label = reward.level_label
    else:
        raise TypeError(f'Unknown reward kind: {reward!r}')

    logger.debug(f'Granted {reward.reward_type} {reward.id} to {actor.key}')


def is_permanent(reward: Reward) -> bool:
    return isinstance(reward, (Badge, Achievement))
