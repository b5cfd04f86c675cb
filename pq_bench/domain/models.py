"""
Domain models for pq-bench.

QueryRecord is the parsed form of one input CSV line. Shard, ShardResult and
Report describe the life of those records through partitioning, execution and
aggregation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field


class QueryRecord(BaseModel):
    """
    Parameters of a single host-usage query.
    """

    key: str = Field(..., description="Host name the query is scoped to.")
    range_start: str = Field(..., description="Inclusive lower bound of the time range.")
    range_end: str = Field(..., description="Inclusive upper bound of the time range.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


@dataclass(frozen=True)
class Shard:
    """Records owned by one worker, in input order."""

    index: int
    records: Tuple[QueryRecord, ...]

    def __len__(self) -> int:
        return len(self.records)

    @property
    def keys(self) -> List[str]:
        """Distinct keys in first-appearance order."""
        return list(dict.fromkeys(r.key for r in self.records))


@dataclass
class ShardResult:
    """
    Latency statistics for one shard.

    Exactly one worker writes to a given instance; nothing else touches it
    until the pool's join barrier has been passed.
    """

    shard_index: int
    query_count: int = 0
    total_latency: float = 0.0
    min_latency: float = math.inf
    max_latency: float = -math.inf
    latencies: List[float] = field(default_factory=list)

    def record(self, latency: float) -> None:
        """Fold one latency sample (seconds) into the running statistics."""
        self.query_count += 1
        self.total_latency += latency
        self.latencies.append(latency)
        if latency < self.min_latency:
            self.min_latency = latency
        if latency > self.max_latency:
            self.max_latency = latency

    @property
    def is_empty(self) -> bool:
        return self.query_count == 0


@dataclass(frozen=True)
class Report:
    """Run-wide latency summary; NaN marks a statistic with no samples."""

    query_count: int
    total_time: float
    min_time: float
    max_time: float
    mean_time: float
    median_time: float

    def as_dict(self) -> Dict[str, Any]:
        """Plain dict with NaN replaced by None (JSON-safe)."""
        out: Dict[str, Any] = {"query_count": self.query_count}
        for name in ("total_time", "min_time", "max_time", "mean_time", "median_time"):
            value = getattr(self, name)
            out[name] = None if math.isnan(value) else value
        return out


__all__ = ["QueryRecord", "Report", "Shard", "ShardResult"]
