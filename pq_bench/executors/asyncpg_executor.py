"""
asyncpg-backed executor for the asyncio worker pool.

asyncpg speaks the binary protocol natively and suits many concurrent
connections on one event loop; each async worker opens its own connection.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import asyncpg

from pq_bench.config import Settings, build_dsn, get_settings
from pq_bench.errors import QueryError
from pq_bench.executors.abstract import Row
from pq_bench.infrastructure.db_factory import connect_async
from pq_bench.query import HostUsageQuery


class AsyncpgExecutor:
    """
    One asyncpg connection per async worker.
    """

    name: str = "asyncpg"
    description: str = "Dedicated asyncpg connection per worker (asyncio tasks)."
    is_async: bool = True

    def __init__(
        self, settings: Optional[Settings] = None, dsn_override: Optional[str] = None
    ) -> None:
        self._settings = settings or get_settings()
        self._dsn = dsn_override or build_dsn(self._settings)

    def prepare(self, worker_count: int) -> None:
        del worker_count

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[asyncpg.Connection]:
        conn = await connect_async(
            self._dsn,
            attempts=self._settings.db_connect_attempts,
            statement_timeout_ms=self._settings.db_statement_timeout_ms,
        )
        try:
            yield conn
        finally:
            await conn.close()

    async def execute(self, conn: asyncpg.Connection, query: HostUsageQuery) -> List[Row]:
        try:
            records = await conn.fetch(query.render("asyncpg"), *query.params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            message = str(exc).strip() or type(exc).__name__
            raise QueryError(f"query failed: {message}", sql=query.describe()) from exc
        return [tuple(record.values()) for record in records]

    def close(self) -> None:
        return None


__all__ = ["AsyncpgExecutor"]
