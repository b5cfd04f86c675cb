"""
Database connection factory utilities for pq-bench.

Centralizes how sync (psycopg), pooled (psycopg_pool) and async (asyncpg)
connections are opened, so executors only deal with running queries.

Connection establishment goes through tenacity. The attempt count comes from
DB_CONNECT_ATTEMPTS and defaults to 1: a run fails on the first connection
error unless the operator explicitly allows more attempts. Queries themselves
are never retried.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import asyncpg
import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import (
    AsyncRetrying,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pq_bench.errors import ExecutorConnectionError
from pq_bench.utils.logging import get_logger

log = get_logger(__name__)

_SYNC_TRANSIENT = (psycopg.OperationalError, psycopg.InterfaceError)
_ASYNC_TRANSIENT = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.PostgresConnectionError,
    asyncpg.InterfaceError,
)
_WAIT = wait_exponential(multiplier=1, min=1, max=10)


def _libpq_options(statement_timeout_ms: int) -> Dict[str, Any]:
    """Extra libpq connect kwargs (statement timeout when enabled)."""
    if statement_timeout_ms > 0:
        return {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return {}


def connect_sync(dsn: str, attempts: int = 1, statement_timeout_ms: int = 0) -> Connection:
    """
    Open a dedicated autocommit psycopg connection.

    Parameters
    ----------
    dsn : str
        libpq connection string or URL.
    attempts : int
        Total connection attempts (1 disables retrying).
    statement_timeout_ms : int
        Server-side statement timeout; 0 leaves the server default.

    Raises
    ------
    ExecutorConnectionError
        If every attempt fails.
    """
    kwargs = _libpq_options(statement_timeout_ms)
    try:
        for attempt in Retrying(
            stop=stop_after_attempt(attempts),
            wait=_WAIT,
            retry=retry_if_exception_type(_SYNC_TRANSIENT),
            reraise=True,
        ):
            with attempt:
                return psycopg.connect(dsn, autocommit=True, **kwargs)
    except psycopg.Error as exc:
        raise ExecutorConnectionError(f"connection to database failed: {exc}") from exc
    raise ExecutorConnectionError("connection to database failed: no attempt was made")


async def connect_async(
    dsn: str, attempts: int = 1, statement_timeout_ms: int = 0
) -> asyncpg.Connection:
    """
    Open an asyncpg connection; async twin of `connect_sync`.
    """
    server_settings: Dict[str, str] = {}
    if statement_timeout_ms > 0:
        server_settings["statement_timeout"] = str(statement_timeout_ms)
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=_WAIT,
            retry=retry_if_exception_type(_ASYNC_TRANSIENT),
            reraise=True,
        ):
            with attempt:
                return await asyncpg.connect(dsn, server_settings=server_settings or None)
    except (*_ASYNC_TRANSIENT, asyncpg.PostgresError) as exc:
        raise ExecutorConnectionError(f"connection to database failed: {exc}") from exc
    raise ExecutorConnectionError("connection to database failed: no attempt was made")


def create_sync_pool(
    dsn: str, size: int, statement_timeout_ms: int = 0, timeout: float = 30.0
) -> ConnectionPool:
    """
    Create an open psycopg pool with exactly ``size`` connections.

    One connection per active worker: each worker leases its connection for
    its whole shard, so a larger pool would never be used.
    """
    kwargs: Dict[str, Any] = {"autocommit": True, **_libpq_options(statement_timeout_ms)}
    log.debug("Opening connection pool", extra={"size": size})
    return ConnectionPool(
        conninfo=dsn,
        kwargs=kwargs,
        min_size=size,
        max_size=size,
        timeout=timeout,
        open=True,
    )


__all__ = ["connect_async", "connect_sync", "create_sync_pool"]
