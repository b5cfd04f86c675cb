"""
First-seen round robin sharding.

The first time a key appears it takes the next slot, wrapping back to 0 after
``worker_count`` slots; every later record for that key reuses the slot.
Assignment therefore depends on first-appearance order, not on key values.
"""

from __future__ import annotations

from typing import Dict

from pq_bench.sharding.abstract import AbstractShardingStrategy


class RoundRobinSharding(AbstractShardingStrategy):
    name: str = "round_robin"
    description: str = "Next free slot per first-seen key, wrapping at the worker count."

    def __init__(self, worker_count: int) -> None:
        super().__init__(worker_count)
        self._assignments: Dict[str, int] = {}
        self._next_slot = 0

    def shard_for(self, key: str) -> int:
        slot = self._assignments.get(key)
        if slot is not None:
            return slot

        slot = self._next_slot
        self._assignments[key] = slot
        self._next_slot = (slot + 1) % self.worker_count
        return slot

    @property
    def assignments(self) -> Dict[str, int]:
        """Snapshot of the key -> shard map built so far."""
        return dict(self._assignments)


__all__ = ["RoundRobinSharding"]
