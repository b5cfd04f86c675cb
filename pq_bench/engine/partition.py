"""
Partitioning of query records into per-worker shards.

Every record lands in exactly one shard and all records sharing a key land in
the same shard. Shards that receive no records are dropped: they never get a
worker and do not count towards the active worker count.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from pq_bench.config import MAX_WORKERS
from pq_bench.domain.models import QueryRecord, Shard
from pq_bench.errors import ConfigurationError
from pq_bench.sharding import DEFAULT_STRATEGY, ShardingStrategy, resolve_strategy
from pq_bench.utils.logging import get_logger

log = get_logger(__name__)


def validate_worker_count(worker_count: int) -> int:
    """Reject worker counts outside ``[1, MAX_WORKERS]``."""
    if isinstance(worker_count, bool) or not isinstance(worker_count, int):
        raise ConfigurationError(f"invalid value for worker count: {worker_count!r}")
    if not 1 <= worker_count <= MAX_WORKERS:
        raise ConfigurationError(
            f"invalid value for worker count: {worker_count} (must be between 1 and {MAX_WORKERS})"
        )
    return worker_count


def partition_records(
    records: Iterable[QueryRecord],
    worker_count: int,
    strategy: str | ShardingStrategy = DEFAULT_STRATEGY,
) -> List[Shard]:
    """
    Split ``records`` into at most ``worker_count`` non-empty shards.

    Parameters
    ----------
    records : iterable[QueryRecord]
        Records in input order. Consumed exactly once; parse errors raised by
        a lazy reader propagate unchanged.
    worker_count : int
        Configured number of workers (1..MAX_WORKERS).
    strategy : str | ShardingStrategy
        Strategy name, resolved to a fresh instance, or a ready instance.

    Returns
    -------
    list[Shard]
        Non-empty shards ordered by shard index; records keep input order.
    """
    validate_worker_count(worker_count)
    sharder = resolve_strategy(strategy, worker_count) if isinstance(strategy, str) else strategy

    buckets: Dict[int, List[QueryRecord]] = {}
    for record in records:
        slot = sharder.shard_for(record.key)
        if not 0 <= slot < worker_count:
            raise ValueError(
                f"sharding strategy {sharder.name!r} returned slot {slot} "
                f"outside [0, {worker_count})"
            )
        buckets.setdefault(slot, []).append(record)
        log.debug(
            f"adding to slot {slot}: {record.key}, {record.range_start}, {record.range_end}",
            extra={"slot": slot},
        )

    shards = [Shard(index=slot, records=tuple(buckets[slot])) for slot in sorted(buckets)]
    log.info(
        f"Partitioned {sum(len(s) for s in shards)} records into {len(shards)} shard(s)",
        extra={
            "strategy": sharder.name,
            "requested_workers": worker_count,
            "active_workers": len(shards),
        },
    )
    return shards


def shard_assignments(shards: Iterable[Shard]) -> Dict[str, int]:
    """Key -> shard index map recovered from a partition."""
    return {record.key: shard.index for shard in shards for record in shard.records}


__all__ = ["partition_records", "shard_assignments", "validate_worker_count"]
