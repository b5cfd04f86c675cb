"""
Error types for pq-bench.

Every failure the harness can report derives from BenchError so the CLI can
turn it into a one-line message and a non-zero exit status. Driver exceptions
are chained (``raise ... from exc``) rather than swallowed.
"""

from __future__ import annotations

from typing import Optional


class BenchError(Exception):
    """Base class for all fatal benchmark errors."""


class ConfigurationError(BenchError):
    """Bad worker count, unknown strategy/executor, or unreadable input source."""


class InputFormatError(BenchError):
    """A record line does not have exactly three non-empty fields."""

    def __init__(self, line_no: int, field_count: int, detail: Optional[str] = None) -> None:
        self.line_no = line_no
        self.field_count = field_count
        message = detail or f"wrong number of fields: {field_count} in input line {line_no}"
        super().__init__(message)


class ExecutorConnectionError(BenchError):
    """A worker could not establish its executor connection."""

    def __init__(self, message: str, shard_index: Optional[int] = None) -> None:
        self.shard_index = shard_index
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.shard_index is None:
            return base
        return f"worker {self.shard_index}: {base}"


class QueryError(BenchError):
    """A worker's query execution failed."""

    def __init__(
        self, message: str, sql: Optional[str] = None, shard_index: Optional[int] = None
    ) -> None:
        self.sql = sql
        self.shard_index = shard_index
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.shard_index is not None:
            base = f"worker {self.shard_index}: {base}"
        if self.sql:
            base = f"{base}\nContent: '{self.sql}'"
        return base


class WorkerCancelled(BenchError):
    """A worker stopped early because another worker failed."""

    def __init__(self, shard_index: int) -> None:
        self.shard_index = shard_index
        super().__init__(f"worker {shard_index} cancelled after a failure in another worker")


__all__ = [
    "BenchError",
    "ConfigurationError",
    "ExecutorConnectionError",
    "InputFormatError",
    "QueryError",
    "WorkerCancelled",
]
