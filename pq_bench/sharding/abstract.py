"""
Abstract sharding interfaces for pq-bench.

A sharding strategy maps a record key to a shard index in ``[0, worker_count)``.
Instances carry per-run state (round robin remembers which keys it has seen),
so the partitioner builds a fresh instance for every partitioning pass.
"""

from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable


@runtime_checkable
class ShardingStrategy(Protocol):
    """
    Common interface all sharding strategies must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the assignment rule.
    worker_count : int
        Number of shard slots handed out by this instance.
    """

    name: str
    description: str
    worker_count: int

    def shard_for(self, key: str) -> int:
        """
        Return the shard index for ``key``.

        Must return the same index for the same key for the lifetime of the
        instance, and must stay within ``[0, worker_count)``.
        """
        ...


class AbstractShardingStrategy(abc.ABC):
    """
    ABC helper for class-based strategies.

    Subclasses set `name` and `description` and implement `shard_for`.
    """

    name: str
    description: str

    def __init__(self, worker_count: int) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be positive, got {worker_count}")
        self.worker_count = worker_count

    @abc.abstractmethod
    def shard_for(self, key: str) -> int:  # pragma: no cover - interface only
        """Map a key to its shard index."""
        raise NotImplementedError


__all__ = ["AbstractShardingStrategy", "ShardingStrategy"]
