import psycopg
import pytest

from gamification.database import db_manager as db_module
from gamification.database.db_manager import DBManager


class _Cursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params):
        if self.conn.fail_next:
            self.conn.fail_next -= 1
            raise psycopg.OperationalError('server closed the connection')
        self.conn.queries.append(query)

    def fetchall(self):
        return []


class _Conn:
    def __init__(self, fail_next=0):
        self.fail_next = fail_next
        self.queries = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self):
        return _Cursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


@pytest.fixture()
def connections(monkeypatch):
    made = []

    def _connect(conninfo, row_factory=None):
        conn = _Conn(fail_next=1 if not made else 0)
        made.append(conn)
        return conn

    monkeypatch.setattr(db_module.psycopg, 'connect', _connect)
    monkeypatch.setenv('DATABASE_URL', 'postgresql://test')
    return made


def test_requires_context():
    with pytest.raises(RuntimeError):
        DBManager().execute('SELECT 1')


def test_commits_on_clean_exit_and_retries_first_statement(connections):
    with DBManager() as db:
        db.execute('SELECT 1')
    assert len(connections) == 2
    assert connections[0].closed
    assert connections[1].queries == ['SELECT 1']
    assert connections[1].committed


def test_rolls_back_on_error(monkeypatch, connections):
    connections.append(_Conn())
    with pytest.raises(ValueError):
        with DBManager() as db:
            db.execute('SELECT 1')
            raise ValueError('boom')
    assert connections[1].rolled_back
    assert not connections[1].committed


def test_no_retry_after_earlier_write(connections):
    connections.append(_Conn())
    with pytest.raises(psycopg.OperationalError):
        with DBManager() as db:
            db.execute('INSERT 1')
            connections[1].fail_next = 1
            db.execute('INSERT 2')
    assert connections[1].rolled_back
