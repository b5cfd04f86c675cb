from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from pq_bench.orchestrator import BenchmarkRun

_TEXT_HEADER = "Benchmark statistics (all times are in seconds):"


def _stat_rows(run: BenchmarkRun) -> List[Tuple[str, float]]:
    report = run.report
    return [
        ("Total queries execution time", report.total_time),
        ("Minimum       execution time", report.min_time),
        ("Maximum       execution time", report.max_time),
        ("Average       execution time", report.mean_time),
        ("Median        execution time", report.median_time),
    ]


def format_report(run: BenchmarkRun) -> str:
    """
    Render the classic fixed-width plain-text summary.

    NaN statistics (no samples) print as ``nan``.
    """
    lines = [
        _TEXT_HEADER,
        f"{'Total # of queries:':<30}{run.report.query_count:10d}",
    ]
    for label, value in _stat_rows(run):
        lines.append(f"{label + ':':<30}{value:10.5f}")
    if run.failed_shards:
        failed = ", ".join(str(i) for i in run.failed_shards)
        lines.append(f"{'Failed workers (excluded):':<30}{failed:>10}")
    return "\n".join(lines)


def report_to_dict(run: BenchmarkRun) -> Dict[str, Any]:
    """JSON-safe representation (NaN -> null)."""
    return run.as_dict()


def format_report_json(run: BenchmarkRun) -> str:
    return json.dumps(report_to_dict(run), indent=2, sort_keys=True)


def _fmt_seconds(value: float) -> str:
    return "N/A" if math.isnan(value) else f"{value:.5f}"


def print_report_table(run: BenchmarkRun, console: Optional[Console] = None) -> None:
    """
    Render the report as a rich table, with run metadata in the caption.
    """
    console = console or Console()

    if run.is_empty:
        console.print("[yellow]No queries were executed.[/yellow]")
        return

    caption_parts = [
        f"workers: {run.active_workers} active / {run.requested_workers} requested",
        f"sharding: {run.sharding}",
        f"executor: {run.executor}",
    ]
    if run.profile is not None:
        caption_parts.append(f"wall: {run.profile.duration_seconds:.3f}s")
    if run.failed_shards:
        caption_parts.append(f"failed: {', '.join(str(i) for i in run.failed_shards)}")

    table = Table(
        title="Benchmark statistics (seconds)",
        box=box.ROUNDED,
        caption=" │ ".join(caption_parts),
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="bold green")

    table.add_row("Total # of queries", f"{run.report.query_count:,}")
    for label, value in _stat_rows(run):
        table.add_row(" ".join(label.split()), _fmt_seconds(value))

    shard_table = Table(title="Queries per worker", box=box.SIMPLE)
    shard_table.add_column("Worker", justify="right", style="magenta")
    shard_table.add_column("Records", justify="right")
    for index, size in sorted(run.shard_sizes.items()):
        shard_table.add_row(str(index), f"{size:,}")

    console.print(table)
    console.print(shard_table)


__all__ = [
    "format_report",
    "format_report_json",
    "print_report_table",
    "report_to_dict",
]
