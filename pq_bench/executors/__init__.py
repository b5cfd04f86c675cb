"""
Executors package for pq-bench.

Re-exports the executor interfaces and concrete implementations, and keeps the
name -> factory registry used by the orchestrator and the CLI.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from pq_bench.config import Settings
from pq_bench.errors import ConfigurationError
from pq_bench.executors.abstract import AsyncQueryExecutor, QueryExecutor, Row
from pq_bench.executors.asyncpg_executor import AsyncpgExecutor
from pq_bench.executors.psycopg_executor import PooledPsycopgExecutor, PsycopgExecutor

DEFAULT_EXECUTOR = PsycopgExecutor.name


def _executor_factories(
    settings: Optional[Settings] = None,
) -> Dict[str, Callable[[], Any]]:
    """Registry of available executors."""
    return {
        PsycopgExecutor.name: lambda: PsycopgExecutor(settings),
        PooledPsycopgExecutor.name: lambda: PooledPsycopgExecutor(settings),
        AsyncpgExecutor.name: lambda: AsyncpgExecutor(settings),
    }


def available_executors() -> List[str]:
    """List available executor names."""
    return sorted(_executor_factories().keys())


def resolve_executor(name: str, settings: Optional[Settings] = None) -> Any:
    factories = _executor_factories(settings)
    if name not in factories:
        raise ConfigurationError(
            f"Unknown executor '{name}'. Available: {', '.join(available_executors())}"
        )
    return factories[name]()


def is_async_executor(executor: Any) -> bool:
    """True when the executor must be driven by the asyncio worker pool."""
    return bool(getattr(executor, "is_async", False))


__all__ = [
    # Abstracts
    "AsyncQueryExecutor",
    "QueryExecutor",
    "Row",
    # Concrete executors
    "AsyncpgExecutor",
    "PooledPsycopgExecutor",
    "PsycopgExecutor",
    # Registry
    "DEFAULT_EXECUTOR",
    "available_executors",
    "is_async_executor",
    "resolve_executor",
]
