"""
Shard workers.

A worker owns one shard and one ShardResult cell. It opens a single executor
connection, runs the shard's queries strictly in shard order, times each one
with a monotonic clock and folds the sample into its cell. Connection and
query failures are re-raised tagged with the shard index; the pool decides
what happens to the rest of the run.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional, Sequence

from pq_bench.domain.models import Shard, ShardResult
from pq_bench.errors import ExecutorConnectionError, QueryError, WorkerCancelled
from pq_bench.query import build_query
from pq_bench.utils.logging import get_logger

log = get_logger(__name__)


def _check_owner(shard: Shard, result: ShardResult) -> None:
    if result.shard_index != shard.index:
        raise ValueError(
            f"result cell {result.shard_index} handed to worker for shard {shard.index}"
        )


def _log_rows(shard_index: int, rows: Sequence[Sequence[Any]]) -> None:
    if not log.isEnabledFor(logging.DEBUG):
        return
    if rows:
        first = rows[0]
        log.debug(
            f"wkr {shard_index} rows: {len(rows)}, 1st row: "
            + ", ".join(f"{name}={value}" for name, value in zip(("bucket", "min", "max"), first))
        )
    else:
        log.debug(f"wkr {shard_index} rows: 0")


def run_shard(
    shard: Shard,
    result: ShardResult,
    executor: Any,
    cancel_event: Optional[threading.Event] = None,
) -> ShardResult:
    """
    Execute every record of ``shard`` and fill ``result``.

    Parameters
    ----------
    shard : Shard
        Records owned exclusively by this worker.
    result : ShardResult
        This worker's pre-allocated cell; nobody else writes to it.
    executor : QueryExecutor
        Provides the scoped connection and runs each query.
    cancel_event : threading.Event, optional
        Checked between records; once set the worker stops with WorkerCancelled.

    Raises
    ------
    ExecutorConnectionError, QueryError
        Tagged with ``shard.index``.
    WorkerCancelled
        If another worker failed first.
    """
    _check_owner(shard, result)
    log.debug(f"Worker {shard.index} starting", extra={"shard": shard.index, "records": len(shard)})
    try:
        with executor.connect() as conn:
            for record in shard.records:
                if cancel_event is not None and cancel_event.is_set():
                    raise WorkerCancelled(shard.index)
                query = build_query(record)
                log.debug(f"from wkr {shard.index}: '{query.describe()}'")

                start = time.perf_counter()
                rows = executor.execute(conn, query)
                latency = time.perf_counter() - start

                result.record(latency)
                _log_rows(shard.index, rows)
    except (ExecutorConnectionError, QueryError) as exc:
        exc.shard_index = shard.index
        raise

    log.debug(
        f"Worker {shard.index} finished",
        extra={"shard": shard.index, "queries": result.query_count},
    )
    return result


async def run_shard_async(shard: Shard, result: ShardResult, executor: Any) -> ShardResult:
    """
    Asyncio twin of `run_shard`.

    Cancellation arrives as ``asyncio.CancelledError`` at the next await
    instead of through an event.
    """
    _check_owner(shard, result)
    log.debug(f"Worker {shard.index} starting", extra={"shard": shard.index, "records": len(shard)})
    try:
        async with executor.connect() as conn:
            for record in shard.records:
                query = build_query(record)
                log.debug(f"from wkr {shard.index}: '{query.describe()}'")

                start = time.perf_counter()
                rows = await executor.execute(conn, query)
                latency = time.perf_counter() - start

                result.record(latency)
                _log_rows(shard.index, rows)
    except (ExecutorConnectionError, QueryError) as exc:
        exc.shard_index = shard.index
        raise

    log.debug(
        f"Worker {shard.index} finished",
        extra={"shard": shard.index, "queries": result.query_count},
    )
    return result


__all__ = ["run_shard", "run_shard_async"]
