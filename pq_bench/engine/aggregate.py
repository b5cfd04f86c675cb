"""
Aggregation of per-shard statistics into the run report.

Runs once, after the pool's join barrier. Shards without samples are skipped
for min/max so an idle shard cannot contribute a spurious extreme; statistics
with no samples at all are NaN rather than zero.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from pq_bench.domain.models import Report, ShardResult


def median_latency(samples: Iterable[float]) -> float:
    """
    Standard median: middle element for odd lengths, mean of the two middle
    elements for even lengths, NaN for no samples.
    """
    ordered = sorted(samples)
    size = len(ordered)
    if size == 0:
        return math.nan
    half = size // 2
    if size % 2:
        return ordered[half]
    return (ordered[half - 1] + ordered[half]) / 2


def aggregate(results: Sequence[ShardResult]) -> Report:
    """
    Merge shard results into a single Report.

    Parameters
    ----------
    results : sequence[ShardResult]
        One cell per shard; empty cells are allowed.
    """
    query_count = sum(r.query_count for r in results)
    total_time = sum(r.total_latency for r in results)
    active = [r for r in results if r.query_count > 0]

    combined: List[float] = []
    for r in active:
        combined.extend(r.latencies)

    if not active:
        return Report(
            query_count=0,
            total_time=0.0,
            min_time=math.nan,
            max_time=math.nan,
            mean_time=math.nan,
            median_time=math.nan,
        )

    return Report(
        query_count=query_count,
        total_time=total_time,
        min_time=min(r.min_latency for r in active),
        max_time=max(r.max_latency for r in active),
        mean_time=total_time / query_count,
        median_time=median_latency(combined),
    )


__all__ = ["aggregate", "median_latency"]
