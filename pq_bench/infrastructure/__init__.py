"""
Infrastructure package for pq-bench.

Centralizes database connectivity concerns (sync/async connections, pooling).
Keep this layer focused on I/O and resource management, decoupled from
executor and engine logic.
"""

from pq_bench.infrastructure.db_factory import connect_async, connect_sync, create_sync_pool

__all__ = [
    "connect_async",
    "connect_sync",
    "create_sync_pool",
]
