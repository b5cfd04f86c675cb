"""
Execution engine for pq-bench: partition, run workers, aggregate.
"""

from pq_bench.engine.aggregate import aggregate, median_latency
from pq_bench.engine.async_pool import run_shards_async
from pq_bench.engine.partition import partition_records, shard_assignments, validate_worker_count
from pq_bench.engine.pool import FAILURE_POLICIES, PoolOutcome, run_shards
from pq_bench.engine.worker import run_shard, run_shard_async

__all__ = [
    "FAILURE_POLICIES",
    "PoolOutcome",
    "aggregate",
    "median_latency",
    "partition_records",
    "run_shard",
    "run_shard_async",
    "run_shards",
    "run_shards_async",
    "shard_assignments",
    "validate_worker_count",
]
