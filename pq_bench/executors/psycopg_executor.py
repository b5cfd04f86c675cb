"""
psycopg-backed executors.

PsycopgExecutor gives every worker its own dedicated connection.
PooledPsycopgExecutor opens a psycopg_pool.ConnectionPool sized to the active
worker count up front, so connection setup happens before the first query is
timed; each worker then leases one pooled connection for its whole shard.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Iterator, List, Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool, PoolTimeout

from pq_bench.config import Settings, build_dsn, get_settings
from pq_bench.errors import ExecutorConnectionError, QueryError
from pq_bench.executors.abstract import Row
from pq_bench.infrastructure.db_factory import connect_sync, create_sync_pool
from pq_bench.query import HostUsageQuery


def _run_query(conn: Connection, query: HostUsageQuery) -> List[Row]:
    try:
        with conn.cursor() as cur:
            cur.execute(query.render("psycopg"), query.params)
            return cur.fetchall()
    except psycopg.Error as exc:
        message = str(exc).strip() or type(exc).__name__
        raise QueryError(f"query failed: {message}", sql=query.describe()) from exc


class PsycopgExecutor:
    """
    One plain psycopg connection per worker.
    """

    name: str = "psycopg"
    description: str = "Dedicated psycopg connection per worker (sync, threads)."
    is_async: bool = False

    def __init__(
        self, settings: Optional[Settings] = None, dsn_override: Optional[str] = None
    ) -> None:
        self._settings = settings or get_settings()
        self._dsn = dsn_override or build_dsn(self._settings)

    def prepare(self, worker_count: int) -> None:
        del worker_count

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        conn = connect_sync(
            self._dsn,
            attempts=self._settings.db_connect_attempts,
            statement_timeout_ms=self._settings.db_statement_timeout_ms,
        )
        try:
            yield conn
        finally:
            conn.close()

    def execute(self, conn: Connection, query: HostUsageQuery) -> List[Row]:
        return _run_query(conn, query)

    def close(self) -> None:
        return None


class PooledPsycopgExecutor:
    """
    Workers lease connections from a psycopg ConnectionPool.
    """

    name: str = "psycopg_pool"
    description: str = "psycopg ConnectionPool sized to the active workers (sync, threads)."
    is_async: bool = False

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
        pool_timeout: float = 30.0,
    ) -> None:
        self._settings = settings or get_settings()
        self._dsn = dsn_override or build_dsn(self._settings)
        self._pool_timeout = pool_timeout
        self._pool_instance: Optional[ConnectionPool] = None

    def prepare(self, worker_count: int) -> None:
        if self._pool_instance is not None:
            self._pool_instance.close()
        pool = create_sync_pool(
            self._dsn,
            size=worker_count,
            statement_timeout_ms=self._settings.db_statement_timeout_ms,
            timeout=self._pool_timeout,
        )
        try:
            pool.wait(timeout=self._pool_timeout)
        except PoolTimeout as exc:
            pool.close()
            raise ExecutorConnectionError(f"connection to database failed: {exc}") from exc
        self._pool_instance = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is None:
            raise RuntimeError("PooledPsycopgExecutor.prepare() must be called before connect()")
        return self._pool_instance

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        pool = self._get_pool()
        with ExitStack() as stack:
            try:
                conn = stack.enter_context(pool.connection())
            except (PoolTimeout, psycopg.OperationalError) as exc:
                raise ExecutorConnectionError(f"connection to database failed: {exc}") from exc
            yield conn

    def execute(self, conn: Connection, query: HostUsageQuery) -> List[Row]:
        return _run_query(conn, query)

    def close(self) -> None:
        if self._pool_instance is not None:
            self._pool_instance.close()
            self._pool_instance = None


__all__ = ["PooledPsycopgExecutor", "PsycopgExecutor"]
