"""
asyncio worker pool: the event-loop counterpart of `pq_bench.engine.pool`.

Same contract (pre-allocated cells, join barrier, failure policies); the
cancellation broadcast is ``Task.cancel()`` on every still-pending worker.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Sequence, Set

from pq_bench.domain.models import Shard, ShardResult
from pq_bench.engine.pool import (
    FailureTracker,
    PoolOutcome,
    allocate_results,
    validate_failure_policy,
)
from pq_bench.engine.worker import run_shard_async
from pq_bench.errors import WorkerCancelled
from pq_bench.utils.logging import get_logger

log = get_logger(__name__)


async def run_shards_async(
    shards: Sequence[Shard],
    executor: Any,
    failure_policy: str = "strict",
) -> PoolOutcome:
    """
    Run one asyncio task per shard and wait for all of them.
    """
    validate_failure_policy(failure_policy)
    results = allocate_results(shards)
    if not shards:
        return PoolOutcome(results=[])

    tracker = FailureTracker(failure_policy)
    log.info(
        f"Starting {len(shards)} async worker(s)",
        extra={"active_workers": len(shards), "failure_policy": failure_policy},
    )

    tasks: Dict[asyncio.Task[ShardResult], Shard] = {
        asyncio.create_task(run_shard_async(shard, cell, executor), name=f"wkr-{shard.index}"): shard
        for shard, cell in zip(shards, results)
    }
    pending: Set[asyncio.Task[ShardResult]] = set(tasks)
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                shard = tasks[task]
                exc = WorkerCancelled(shard.index) if task.cancelled() else task.exception()
                if tracker.observe(shard, exc):
                    for other in pending:
                        other.cancel()
    finally:
        # Only reached with tasks left when the pool itself is cancelled.
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    return tracker.outcome(results)


__all__ = ["run_shards_async"]
