"""
Hash-mod sharding: ``crc32(key) mod worker_count``.

CRC-32 keeps the mapping stable across processes; the built-in ``hash()`` is
salted per interpreter run and would not.
"""

from __future__ import annotations

import zlib

from pq_bench.sharding.abstract import AbstractShardingStrategy


def stable_hash(key: str) -> int:
    return zlib.crc32(key.encode("utf-8"))


class HashSharding(AbstractShardingStrategy):
    name: str = "hash"
    description: str = "CRC-32 of the key modulo the worker count (order independent)."

    def shard_for(self, key: str) -> int:
        return stable_hash(key) % self.worker_count


__all__ = ["HashSharding", "stable_hash"]
