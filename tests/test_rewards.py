import pytest

from gamification.engine.rewards import grant, is_permanent
from gamification.errors import ValidationError
from gamification.models.actor import Player
from gamification.models.reward import Achievement, Badge, Coins, Points, ReceiveLevel


def test_permanent_rewards_are_appended():
    player = Player()
    badge = Badge(id=1, organisation_id=1, name='Starter')
    achievement = Achievement(id=2, organisation_id=1, name='Marathon')
    grant(badge, player)
    grant(achievement, player)
    assert player.rewards == [badge, achievement]
    assert player.badges == [badge]
    assert player.achievements == [achievement]
    assert is_permanent(badge) and not is_permanent(Points(id=3, organisation_id=1, amount=1))


def test_volatile_rewards_update_balances():
    player = Player(points=5, coins=1)
    grant(Points(id=3, organisation_id=1, amount=10), player)
    grant(Coins(id=4, organisation_id=1, amount=2), player)
    grant(ReceiveLevel(id=5, organisation_id=1, level_index=3, level_label='Gold'), player)
    assert (player.points, player.coins) == (15, 3)
    assert (player.level_index, player.level_label) == (3, 'Gold')
    assert player.rewards == []


def test_level_reward_overwrites_not_accumulates():
    player = Player(level_index=7)
    grant(ReceiveLevel(id=5, organisation_id=1, level_index=2), player)
    assert player.level_index == 2


@pytest.mark.parametrize(
    'factory',
    [
        lambda: Points(id=1, organisation_id=1, amount=-1),
        lambda: Coins(id=1, organisation_id=1, amount=-5),
        lambda: ReceiveLevel(id=1, organisation_id=1, level_index=-1),
    ],
)
def test_malformed_rewards_rejected_at_construction(factory):
    with pytest.raises(ValidationError):
        factory()


def test_grant_none_is_a_programming_error():
    with pytest.raises(TypeError):
        grant(None, Player())  # type: ignore[arg-type]
