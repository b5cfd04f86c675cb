"""
pq-bench - concurrent host-usage query benchmark for PostgreSQL/TimescaleDB.

Replays a CSV of ``hostname,start_time,end_time`` query parameters against a
``cpu_usage`` hypertable with up to 50 parallel workers and reports total,
minimum, maximum, mean and median query latency:

- Records are sharded by host (first-seen round robin or CRC-32 hash), so all
  queries for a host run on the same worker, in input order
- Each worker owns one connection and one result cell; cells are merged only
  after every worker has finished
- Executors: dedicated psycopg connections, a psycopg pool, or asyncpg
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from pq_bench.config import MAX_WORKERS, Settings, get_settings
from pq_bench.domain.models import QueryRecord, Report, Shard, ShardResult
from pq_bench.engine import aggregate, median_latency, partition_records, run_shards
from pq_bench.errors import (
    BenchError,
    ConfigurationError,
    ExecutorConnectionError,
    InputFormatError,
    QueryError,
)
from pq_bench.orchestrator import BenchmarkRun, RunConfig, run_benchmark
from pq_bench.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "MAX_WORKERS",
    "Settings",
    "get_settings",
    # Domain
    "QueryRecord",
    "Report",
    "Shard",
    "ShardResult",
    # Engine
    "aggregate",
    "median_latency",
    "partition_records",
    "run_shards",
    # Orchestration
    "BenchmarkRun",
    "RunConfig",
    "run_benchmark",
    # Errors
    "BenchError",
    "ConfigurationError",
    "ExecutorConnectionError",
    "InputFormatError",
    "QueryError",
    # Logging
    "configure_logging",
    "get_logger",
]
