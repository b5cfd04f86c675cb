"""
Thread-based worker pool.

One task per shard on a ThreadPoolExecutor sized to the shard count. Result
cells are allocated before the first task is submitted and each task gets
exactly one of them, so the cell list needs no lock. Leaving the executor's
``with`` block is the join barrier: nothing is returned or raised until every
task has terminated.

Failure policies
----------------
strict
    The first failure sets a shared cancellation event; other workers stop at
    their next record boundary, and the failure is raised after the barrier.
    The same event is set when the pool itself is interrupted.
tolerant
    Connection and query failures are logged and the failing shards are
    excluded from the outcome; unexpected exceptions remain fatal.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pq_bench.domain.models import Shard, ShardResult
from pq_bench.engine.worker import run_shard
from pq_bench.errors import BenchError, ConfigurationError, WorkerCancelled
from pq_bench.utils.logging import get_logger

log = get_logger(__name__)

FAILURE_POLICIES = ("strict", "tolerant")


@dataclass
class PoolOutcome:
    """Cells of the shards that completed, plus the failures by shard index."""

    results: List[ShardResult]
    failures: Dict[int, BaseException] = field(default_factory=dict)

    @property
    def failed_shards(self) -> List[int]:
        return sorted(
            index
            for index, exc in self.failures.items()
            if not isinstance(exc, WorkerCancelled)
        )


def validate_failure_policy(policy: str) -> str:
    if policy not in FAILURE_POLICIES:
        raise ConfigurationError(
            f"Unknown failure policy '{policy}'. Available: {', '.join(FAILURE_POLICIES)}"
        )
    return policy


def allocate_results(shards: Sequence[Shard]) -> List[ShardResult]:
    """One empty cell per shard, in shard order."""
    return [ShardResult(shard_index=shard.index) for shard in shards]


class FailureTracker:
    """Decides, per finished task, whether the run must abort."""

    def __init__(self, policy: str) -> None:
        self.policy = policy
        self.failures: Dict[int, BaseException] = {}
        self.first_fatal: Optional[BaseException] = None

    def observe(self, shard: Shard, exc: Optional[BaseException]) -> bool:
        """Record a task outcome; True when this is the run's first fatal failure."""
        if exc is None:
            return False
        self.failures[shard.index] = exc
        if isinstance(exc, WorkerCancelled):
            log.debug(f"Worker {shard.index} cancelled", extra={"shard": shard.index})
            return False

        fatal = self.policy == "strict" or not isinstance(exc, BenchError)
        if not fatal:
            log.warning(
                f"Worker {shard.index} failed; excluding shard from report: {exc}",
                extra={"shard": shard.index, "error_type": type(exc).__name__},
            )
            return False
        if self.first_fatal is not None:
            log.debug(f"Worker {shard.index} also failed: {exc}", extra={"shard": shard.index})
            return False

        self.first_fatal = exc
        log.error(
            f"Worker {shard.index} failed; aborting run: {exc}",
            extra={"shard": shard.index, "error_type": type(exc).__name__},
        )
        return True

    def outcome(self, results: List[ShardResult]) -> PoolOutcome:
        if self.first_fatal is not None:
            raise self.first_fatal
        completed = [cell for cell in results if cell.shard_index not in self.failures]
        return PoolOutcome(results=completed, failures=dict(self.failures))


def run_shards(
    shards: Sequence[Shard],
    executor: Any,
    failure_policy: str = "strict",
) -> PoolOutcome:
    """
    Run one worker thread per shard and wait for all of them.

    Parameters
    ----------
    shards : sequence[Shard]
        Non-empty shards from the partitioner.
    executor : QueryExecutor
        Shared executor; each worker opens its own connection through it.
    failure_policy : str
        "strict" (abort on first failure) or "tolerant" (isolate failed shards).

    Returns
    -------
    PoolOutcome
        Completed cells (all of them under "strict") and failures by shard.
    """
    validate_failure_policy(failure_policy)
    results = allocate_results(shards)
    if not shards:
        return PoolOutcome(results=[])

    cancel_event = threading.Event()
    tracker = FailureTracker(failure_policy)

    log.info(
        f"Starting {len(shards)} worker(s)",
        extra={"active_workers": len(shards), "failure_policy": failure_policy},
    )
    with ThreadPoolExecutor(max_workers=len(shards), thread_name_prefix="wkr") as pool:
        futures: Dict[Future[ShardResult], Shard] = {
            pool.submit(run_shard, shard, cell, executor, cancel_event): shard
            for shard, cell in zip(shards, results)
        }
        try:
            for future in as_completed(futures):
                if tracker.observe(futures[future], future.exception()):
                    cancel_event.set()
        except BaseException:
            # Stop the workers before the executor shutdown joins them.
            cancel_event.set()
            raise

    return tracker.outcome(results)


__all__ = [
    "FAILURE_POLICIES",
    "FailureTracker",
    "PoolOutcome",
    "allocate_results",
    "run_shards",
    "validate_failure_policy",
]
