"""
Domain package for pq-bench.

Exports the core data types shared by the parser, partitioner, workers and
aggregator. Keep this package focused on data definitions.
"""

from pq_bench.domain.models import QueryRecord, Report, Shard, ShardResult

__all__ = [
    "QueryRecord",
    "Report",
    "Shard",
    "ShardResult",
]
