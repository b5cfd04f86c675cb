"""
Query executor interfaces for pq-bench.

An executor is the boundary between the engine and the database driver: it
hands each worker a scoped connection and runs one HostUsageQuery on it,
translating driver failures into ExecutorConnectionError / QueryError. The
engine only relies on success versus failure; returned rows are used for
debug logging.
"""

from __future__ import annotations

from typing import (
    Any,
    AsyncContextManager,
    ContextManager,
    List,
    Protocol,
    Sequence,
    runtime_checkable,
)

from pq_bench.query import HostUsageQuery

Row = Sequence[Any]


@runtime_checkable
class QueryExecutor(Protocol):
    """
    Blocking executor used by thread-based workers.

    Attributes
    ----------
    name : str
        Registry identifier.
    description : str
        Human-friendly summary.
    """

    name: str
    description: str

    def prepare(self, worker_count: int) -> None:
        """Called once before any worker starts, with the active worker count."""
        ...

    def connect(self) -> ContextManager[Any]:
        """Scoped connection for one worker; released on every exit path."""
        ...

    def execute(self, conn: Any, query: HostUsageQuery) -> List[Row]:
        """Run ``query`` on ``conn`` and return its rows."""
        ...

    def close(self) -> None:
        """Release executor-wide resources after the join barrier."""
        ...


@runtime_checkable
class AsyncQueryExecutor(Protocol):
    """
    Coroutine-based executor used by the asyncio worker pool.
    """

    name: str
    description: str
    is_async: bool

    def prepare(self, worker_count: int) -> None:
        ...

    def connect(self) -> AsyncContextManager[Any]:
        ...

    async def execute(self, conn: Any, query: HostUsageQuery) -> List[Row]:
        ...

    def close(self) -> None:
        ...


__all__ = ["AsyncQueryExecutor", "QueryExecutor", "Row"]
