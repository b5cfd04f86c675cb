"""
Query-parameter generation and sample data loading for pq-bench.

Writes a ``hostname,start_time,end_time`` CSV of random one-hour windows, and
optionally creates the ``cpu_usage`` table and loads synthetic per-minute usage
samples into it via COPY so the generated queries have something to scan.
"""

from __future__ import annotations

import csv
import random
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path

import psycopg
import typer

from pq_bench.config import build_dsn

app = typer.Typer(help="Generate query parameters (CSV) and optional cpu_usage sample data.")

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_START = datetime(2017, 1, 1)
WINDOW = timedelta(hours=1)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cpu_usage (
    ts    TIMESTAMPTZ NOT NULL,
    host  TEXT        NOT NULL,
    usage DOUBLE PRECISION
);
"""
_HYPERTABLE_SQL = "SELECT create_hypertable('cpu_usage', 'ts', if_not_exists => TRUE);"


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def host_name(index: int) -> str:
    return f"host_{index:06d}"


def _generate_queries_csv(
    csv_path: Path, queries: int, hosts: int, days: int, seed: int
) -> None:
    rng = random.Random(seed)
    span_seconds = int(timedelta(days=days).total_seconds() - WINDOW.total_seconds())

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["hostname", "start_time", "end_time"])
        for _ in range(queries):
            start = DEFAULT_START + timedelta(seconds=rng.randint(0, max(span_seconds, 0)))
            writer.writerow(
                [
                    host_name(rng.randrange(hosts)),
                    start.strftime(TIME_FORMAT),
                    (start + WINDOW).strftime(TIME_FORMAT),
                ]
            )


def _generate_usage_csv(csv_path: Path, hosts: int, days: int, seed: int) -> int:
    rng = random.Random(seed)
    minutes = days * 24 * 60
    rows = 0

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["ts", "host", "usage"])
        for minute in range(minutes):
            ts = (DEFAULT_START + timedelta(minutes=minute)).strftime(TIME_FORMAT)
            for index in range(hosts):
                writer.writerow([ts, host_name(index), f"{rng.uniform(0, 100):.2f}"])
                rows += 1
    return rows


def _copy_into_db(dsn: str, csv_path: Path, hypertable: bool) -> None:
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(_SCHEMA_SQL)
            if hypertable:
                cur.execute(_HYPERTABLE_SQL)
            with cur.copy(
                "COPY cpu_usage (ts, host, usage) FROM STDIN WITH (FORMAT csv, HEADER TRUE)"
            ) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)
        conn.commit()


@app.command()
def main(
    queries: int = typer.Option(1_000, "--queries", "-q", help="Number of query lines."),
    hosts: int = typer.Option(10, "--hosts", help="Number of distinct host names."),
    days: int = typer.Option(2, "--days", help="Length of the sampled period, in days."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path = typer.Option(
        Path("query_params.csv"), "--output", "-o", help="Query-parameter CSV path."
    ),
    load: bool = typer.Option(
        False, "--load", help="Also create cpu_usage and load synthetic usage samples."
    ),
    hypertable: bool = typer.Option(
        True,
        "--hypertable/--plain-table",
        help="Convert cpu_usage into a TimescaleDB hypertable when loading.",
    ),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Generate query parameters and optionally seed the database.
    """
    start = time.perf_counter()
    output.parent.mkdir(parents=True, exist_ok=True)
    typer.echo(f"Generating {queries:,} queries over {hosts} hosts -> {output} (seed={seed})")
    _generate_queries_csv(output, queries=queries, hosts=hosts, days=days, seed=seed)
    typer.echo(f"Query CSV written in {time.perf_counter() - start:.2f}s")

    if not load:
        return

    usage_path = output.with_name(output.stem + "_usage.csv")
    rows = _generate_usage_csv(usage_path, hosts=hosts, days=days, seed=seed)
    typer.echo(f"Loading {rows:,} usage samples via COPY...")
    load_start = time.perf_counter()
    _copy_into_db(_build_dsn(dsn), usage_path, hypertable=hypertable)
    typer.echo(f"Load completed in {time.perf_counter() - load_start:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
