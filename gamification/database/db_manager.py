import logging
import os
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

T = TypeVar('T')

logger = logging.getLogger(__name__)


def require_connection(func: Callable) -> Callable:
    '''Decorator to ensure DBManager is used within a context manager.'''

    @wraps(func)
    def wrapper(self: 'DBManager', *args, **kwargs) -> Any:
        if not self._connected:
            raise RuntimeError(
                'DBManager is not in a context. Use "with DBManager() as db:"'
            )
        return func(self, *args, **kwargs)

    return wrapper


def _conninfo(db_url: Optional[str]) -> str:
    conninfo = db_url or os.getenv('DATABASE_URL')
    if not conninfo:
        raise RuntimeError('DATABASE_URL is not set.')
    return conninfo


class DBManager:
    '''Postgres connection scoped to one transaction.

    Everything run inside ``with DBManager() as db:`` commits together on a
    clean exit and rolls back on an exception, so one task completion is
    persisted all-or-nothing.
    '''

    # Shared pool across the process
    _pool: Optional[ConnectionPool] = None

    def __init__(self, db_url: Optional[str] = None) -> None:
        self._db_url = db_url
        self._connected: bool = False
        self._pg_conn: Any | None = None
        self._from_pool: bool = False
        self._dirty: bool = False

    @classmethod
    def init_pool(
        cls,
        db_url: Optional[str] = None,
        min_size: int = 1,
        max_size: int = 10,
    ) -> None:
        '''Initialize a global connection pool for reuse across requests.'''
        if cls._pool is not None:
            return
        cls._pool = ConnectionPool(
            conninfo=_conninfo(db_url),
            min_size=min_size,
            max_size=max_size,
            kwargs={'row_factory': dict_row},
        )
        logger.info('Initialized Postgres connection pool')

    @classmethod
    def close_pool(cls) -> None:
        if cls._pool is not None:
            try:
                cls._pool.close()
            finally:
                cls._pool = None

    def _acquire(self) -> None:
        pool = self.__class__._pool
        if pool is not None:
            self._pg_conn = pool.getconn()
            self._from_pool = True
        else:
            self._pg_conn = psycopg.connect(
                _conninfo(self._db_url), row_factory=dict_row
            )
            self._from_pool = False

    def _release(self) -> None:
        pool = self.__class__._pool
        try:
            if self._pg_conn is None:
                return
            if self._from_pool and pool is not None:
                # a broken connection is discarded by the pool
                pool.putconn(self._pg_conn)
            else:
                self._pg_conn.close()
        finally:
            self._pg_conn = None
            self._from_pool = False

    def __enter__(self) -> 'DBManager':
        self._acquire()
        self._connected = True
        self._dirty = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._connected:
            return
        try:
            if exc_type is None:
                self._pg_conn.commit()
            else:
                self._pg_conn.rollback()
        finally:
            self._release()
            self._connected = False

    def _run_with_retry(self, fn: Callable[[], T]) -> T:
        '''Run fn; on a dropped connection reconnect and retry once.

        Only the first statement of a transaction is retried, later ones
        would silently lose the earlier writes of the same transaction.
        '''
        try:
            result = fn()
            self._dirty = True
            return result
        except (psycopg.OperationalError, psycopg.InterfaceError) as e:
            if self._dirty:
                raise
            logger.warning(f'DB connection issue: {e}. Reconnecting and retrying once')
            try:
                self._release()
            except Exception as close_error:
                logger.warning(f'Error while closing broken connection: {close_error}')
            self._acquire()
            result = fn()
            self._dirty = True
            return result

    def _select(
        self, query: str, params: Iterable[Any] | None
    ) -> Tuple[List[dict[str, Any]], List[str]]:
        assert self._pg_conn is not None
        with self._pg_conn.cursor() as cur:
            cur.execute(query, tuple(params or ()))
            rows: List[dict[str, Any]] = cur.fetchall()
            cols = [d.name for d in cur.description] if cur.description else []
            return rows, cols

    def _exec(self, query: str, params: Iterable[Any] | None) -> None:
        assert self._pg_conn is not None
        with self._pg_conn.cursor() as cur:
            cur.execute(query, tuple(params or ()))

    @require_connection
    def execute(self, query: str, params: Iterable[Any] | None = None) -> None:
        try:
            self._run_with_retry(lambda: self._exec(query, params))
        except Exception as e:
            logger.error(f'execute() error: {e}\nQuery: {query}\nParams: {params}')
            raise

    @require_connection
    def executemany(self, query: str, param_list: Iterable[Sequence[Any]]) -> None:
        rows = list(param_list)

        def _do() -> None:
            assert self._pg_conn is not None
            with self._pg_conn.cursor() as cur:
                cur.executemany(query, rows)

        try:
            self._run_with_retry(_do)
        except Exception as e:
            logger.error(f'executemany() error: {e}\nQuery: {query}')
            raise

    @require_connection
    def fetchall(
        self, query: str, params: Iterable[Any] | None = None
    ) -> List[dict[str, Any]]:
        try:
            rows, _ = self._run_with_retry(lambda: self._select(query, params))
            return rows
        except Exception as e:
            logger.error(f'fetchall() error: {e}\nQuery: {query}\nParams: {params}')
            raise

    @require_connection
    def fetchone(
        self, query: str, params: Iterable[Any] | None = None
    ) -> Optional[dict[str, Any]]:
        rows = self.fetchall(query, params)
        return rows[0] if rows else None
