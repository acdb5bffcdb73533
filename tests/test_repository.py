import pytest

from conftest import at, seed_snapshot
from gamification.engine import GamificationEngine
from gamification.errors import NotFound
from gamification.models.reward import Badge, Points
from gamification.services.repository import Repository


def test_load_organisation_builds_registry(fake_db):
    seed_snapshot(fake_db)
    registry = Repository(fake_db).load_organisation('acme-key')

    assert fake_db.queries[0].startswith('SELECT id, name, api_key FROM organisations')
    player = registry.player(7)
    assert player.points == 3
    assert {r.name for r in player.roles} == {'member'}
    assert [ft.task.name for ft in player.finished_tasks] == ['A']
    assert [t.name for t in registry.rule(1).tasks] == ['A', 'B']
    assert isinstance(registry.reward(2), Badge)
    assert registry.group(1).players == [player]


def test_load_unknown_organisation(fake_db):
    with pytest.raises(NotFound):
        Repository(fake_db).load_organisation('nope')


def test_completion_round_trip_saves_outcome(fake_db):
    seed_snapshot(fake_db)
    repo = Repository(fake_db)
    registry = repo.load_organisation('acme-key')
    player = repo.find_player(registry, '1001')

    outcome = GamificationEngine(registry).complete_task(
        player, registry.task(2), finished_at=at(0)
    )
    assert player.points == 53
    assert isinstance(outcome.granted_rewards[0].reward, Points)

    fake_db.fetchone_results = [{'id': 12}, {'id': 21}, {'id': 22}]
    ids = repo.save_outcome(outcome)

    assert ids == {'finished_task_id': 12, 'finished_goal_ids': [21, 22]}
    inserts = [q for q, _ in fake_db.executed if q.startswith('INSERT INTO granted_rewards')]
    assert len(inserts) == 1
    updates = [p for q, p in fake_db.executed if q.startswith('UPDATE players')]
    assert updates == [(53, 0, 0, '', 7)]
