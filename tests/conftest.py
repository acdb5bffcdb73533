import contextlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator

import pytest

from gamification.engine.registry import OrganisationRegistry
from gamification.models.actor import Player
from gamification.models.organisation import Organisation, Role
from gamification.models.task import FinishedTask, Task

T0 = datetime(2026, 2, 5, 10, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


def finished(task: Task, minutes: int, player_id: int = 1) -> FinishedTask:
    return FinishedTask(task=task, finished_at=at(minutes), player_id=player_id)


@dataclass
class FakeDB:
    fetchone_results: list[Any] = field(default_factory=list)
    fetchall_results: list[Any] = field(default_factory=list)
    executed: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    last_query: str | None = None
    last_params: tuple[Any, ...] | None = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def fetchone(self, query: str, params=None):
        self.last_query = query
        self.last_params = tuple(params or ())
        self.queries.append(query)
        if self.fetchone_results:
            return self.fetchone_results.pop(0)

    def fetchall(self, query: str, params=None):
        self.last_query = query
        self.last_params = tuple(params or ())
        self.queries.append(query)
        if self.fetchall_results:
            return self.fetchall_results.pop(0)
        return []

    def execute(self, query: str, params=None) -> None:
        self.executed.append((query, tuple(params or ())))


class FakeDBManager:
    def __init__(self, db: FakeDB):
        self._db = db

    def __call__(self):
        return self._db


@contextlib.contextmanager
def patched_dbmanager(monkeypatch, target_module, db: FakeDB) -> Iterator[FakeDB]:
    monkeypatch.setattr(target_module, 'DBManager', FakeDBManager(db))
    yield db


def seed_snapshot(fake_db: FakeDB) -> None:
    '''Queue the rows Repository.load_organisation reads for org "acme-key".'''
    fake_db.fetchone_results = [{'id': 1, 'name': 'Acme', 'api_key': 'acme-key'}]
    fake_db.fetchall_results = [
        # roles
        [{'id': 1, 'name': 'member'}],
        # tasks
        [
            {'id': 1, 'name': 'A', 'description': '', 'tradeable': False, 'role_ids': [1]},
            {'id': 2, 'name': 'B', 'description': '', 'tradeable': False, 'role_ids': []},
        ],
        # rules
        [
            {'id': 1, 'organisation_id': 1, 'rule_type': 'all_tasks', 'name': 'A+B', 'task_ids': [1, 2]},
            {'id': 2, 'organisation_id': 1, 'rule_type': 'points', 'name': '50', 'points': 50},
        ],
        # rewards
        [
            {'id': 1, 'organisation_id': 1, 'reward_type': 'points', 'amount': 50},
            {'id': 2, 'organisation_id': 1, 'reward_type': 'badge', 'name': 'Fifty'},
        ],
        # goals
        [
            {'id': 1, 'name': 'both', 'rule_id': 1, 'reward_ids': [1], 'role_ids': []},
            {'id': 2, 'name': 'rich', 'rule_id': 2, 'reward_ids': [2], 'role_ids': []},
        ],
        # players
        [
            {'id': 7, 'nickname': 'ada', 'reference': '1001', 'is_active': True, 'role_ids': [1], 'points': 3},
        ],
        # groups
        [{'id': 1, 'name': 'team', 'player_ids': [7], 'points': 0}],
        # finished tasks
        [{'id': 11, 'task_id': 1, 'player_id': 7, 'finished_at': T0 - timedelta(days=4)}],
        # finished goals
        [],
        # granted rewards
        [],
    ]


@pytest.fixture()
def fake_db() -> FakeDB:
    return FakeDB()


@pytest.fixture()
def org() -> Organisation:
    return Organisation(id=1, name='Acme', api_key='acme-key')


@pytest.fixture()
def registry(org) -> OrganisationRegistry:
    return OrganisationRegistry(org)


@pytest.fixture()
def member_role(org) -> Role:
    return Role(id=1, organisation_id=org.id, name='member')


@pytest.fixture()
def player(registry, member_role) -> Player:
    return registry.add_player(
        Player(id=1, organisation_id=1, nickname='ada', reference='1001', roles={member_role})
    )


@pytest.fixture()
def tasks(registry) -> dict[str, Task]:
    '''Tasks A, B and C with ids 1, 2 and 3.'''
    return {
        name: registry.add_task(Task(id=i, organisation_id=1, name=name))
        for i, name in enumerate('ABC', start=1)
    }
