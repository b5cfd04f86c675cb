"""
Orchestrator for a benchmark run: read, partition, execute, aggregate.

Usage (example from CLI):
    from pq_bench.orchestrator import RunConfig, run_benchmark

    run = run_benchmark(RunConfig(worker_count=4, input_path="query_params.csv"))
    print(run.report.median_time)

Every configuration value is validated when the RunConfig is built, so bad
values fail before any input is read or partitioned.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from pq_bench.config import get_settings
from pq_bench.domain.models import Report, Shard
from pq_bench.engine.aggregate import aggregate
from pq_bench.engine.async_pool import run_shards_async
from pq_bench.engine.partition import partition_records, validate_worker_count
from pq_bench.engine.pool import PoolOutcome, run_shards, validate_failure_policy
from pq_bench.errors import ConfigurationError
from pq_bench.executors import available_executors, is_async_executor, resolve_executor
from pq_bench.ingest.parser import open_input, read_records
from pq_bench.sharding import available_strategies
from pq_bench.utils.logging import get_logger
from pq_bench.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


def _default_sharding() -> str:
    return get_settings().bench_sharding


def _default_executor() -> str:
    return get_settings().bench_executor


def _default_failure_policy() -> str:
    return get_settings().bench_failure_policy


@dataclass(frozen=True)
class RunConfig:
    """
    Validated parameters of one benchmark run.

    Parameters
    ----------
    worker_count : int
        Requested workers, 1..MAX_WORKERS.
    input_path : Path | str | None
        Input CSV; None or "-" reads standard input.
    sharding : str
        Sharding strategy name (defaults to BENCH_SHARDING).
    executor : str
        Executor name (defaults to BENCH_EXECUTOR).
    failure_policy : str
        "strict" or "tolerant" (defaults to BENCH_FAILURE_POLICY).
    """

    worker_count: int
    input_path: Optional[Path | str] = None
    sharding: str = field(default_factory=_default_sharding)
    executor: str = field(default_factory=_default_executor)
    failure_policy: str = field(default_factory=_default_failure_policy)

    def __post_init__(self) -> None:
        validate_worker_count(self.worker_count)
        if self.sharding not in available_strategies():
            raise ConfigurationError(
                f"Unknown sharding strategy '{self.sharding}'. "
                f"Available: {', '.join(available_strategies())}"
            )
        if self.executor not in available_executors():
            raise ConfigurationError(
                f"Unknown executor '{self.executor}'. "
                f"Available: {', '.join(available_executors())}"
            )
        validate_failure_policy(self.failure_policy)


@dataclass
class BenchmarkRun:
    """Report plus the metadata needed to interpret it."""

    report: Report
    requested_workers: int
    active_workers: int
    sharding: str
    executor: str
    failure_policy: str
    shard_sizes: Dict[int, int] = field(default_factory=dict)
    failed_shards: List[int] = field(default_factory=list)
    profile: Optional[ProfileStats] = None

    @property
    def is_empty(self) -> bool:
        return not self.shard_sizes

    def as_dict(self) -> Dict[str, Any]:
        return {
            "report": self.report.as_dict(),
            "requested_workers": self.requested_workers,
            "active_workers": self.active_workers,
            "sharding": self.sharding,
            "executor": self.executor,
            "failure_policy": self.failure_policy,
            "shard_sizes": {str(k): v for k, v in sorted(self.shard_sizes.items())},
            "failed_shards": list(self.failed_shards),
            "profile": self.profile.as_dict() if self.profile else None,
        }


def _read_and_partition(config: RunConfig, stream: Optional[TextIO]) -> List[Shard]:
    if stream is not None:
        return partition_records(read_records(stream), config.worker_count, config.sharding)
    with open_input(config.input_path) as source:
        return partition_records(read_records(source), config.worker_count, config.sharding)


def _execute(shards: List[Shard], executor: Any, failure_policy: str) -> PoolOutcome:
    if not is_async_executor(executor):
        return run_shards(shards, executor, failure_policy)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "run_benchmark() cannot drive an async executor from inside a running event loop "
            "(async context); await pq_bench.engine.run_shards_async instead"
        )
    return asyncio.run(run_shards_async(shards, executor, failure_policy))


def run_benchmark(
    config: RunConfig,
    stream: Optional[TextIO] = None,
    executor: Any = None,
) -> BenchmarkRun:
    """
    Run one benchmark end to end.

    Parameters
    ----------
    config : RunConfig
        Validated run parameters.
    stream : TextIO, optional
        Already-open input; overrides ``config.input_path``.
    executor : QueryExecutor | AsyncQueryExecutor, optional
        Ready executor instance; overrides ``config.executor``.

    Returns
    -------
    BenchmarkRun
        The aggregated report plus run metadata. With no input records the
        report holds zero queries and NaN statistics and no connection is made.
    """
    shards = _read_and_partition(config, stream)
    executor_name = getattr(executor, "name", config.executor) if executor else config.executor

    run = BenchmarkRun(
        report=aggregate([]),
        requested_workers=config.worker_count,
        active_workers=len(shards),
        sharding=config.sharding,
        executor=executor_name,
        failure_policy=config.failure_policy,
        shard_sizes={shard.index: len(shard) for shard in shards},
    )
    if not shards:
        log.warning("no input CSV content, exiting")
        return run

    if executor is None:
        executor = resolve_executor(config.executor)

    log.info(
        f"[RUN START] {len(shards)} active worker(s) of {config.worker_count} requested",
        extra={
            "sharding": config.sharding,
            "executor": executor_name,
            "real_worker_count": len(shards),
        },
    )
    try:
        executor.prepare(len(shards))
        with profile_block("benchmark") as stats:
            outcome = _execute(shards, executor, config.failure_policy)
    finally:
        executor.close()

    run.report = aggregate(outcome.results)
    run.failed_shards = outcome.failed_shards
    run.profile = stats
    log.info(
        "[RUN COMPLETE]",
        extra={
            "queries": run.report.query_count,
            "wall_seconds": round(stats.duration_seconds, 6),
            "failed_shards": run.failed_shards,
        },
    )
    return run


__all__ = ["BenchmarkRun", "RunConfig", "run_benchmark"]
