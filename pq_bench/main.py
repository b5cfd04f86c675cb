from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from pq_bench.config import MAX_WORKERS, build_dsn, get_settings
from pq_bench.errors import BenchError, ConfigurationError
from pq_bench.executors import available_executors
from pq_bench.orchestrator import RunConfig, run_benchmark
from pq_bench.reporter import format_report, format_report_json, print_report_table
from pq_bench.sharding import available_strategies
from pq_bench.utils.logging import configure_logging

OUTPUT_FORMATS = ("text", "table", "json")

app = typer.Typer(
    help="Benchmark host-usage SQL queries against a TimescaleDB hypertable.",
    no_args_is_help=True,
)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={build_dsn(settings, redact=True)} | "
        f"sharding={settings.bench_sharding} executor={settings.bench_executor} "
        f"failure_policy={settings.bench_failure_policy} max_workers={MAX_WORKERS}"
    )


@app.command("list")
def list_choices() -> None:
    """
    List available sharding strategies and executors.
    """
    typer.echo("Sharding strategies: " + ", ".join(available_strategies()))
    typer.echo("Executors: " + ", ".join(available_executors()))


@app.command()
def run(
    workers: int = typer.Option(
        ...,
        "--workers",
        "-n",
        help=f"Number of worker threads, between 1 and {MAX_WORKERS}.",
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Input CSV with the queries' parameters. If omitted, standard input is read.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug output (slot assignment, queries, first returned row).",
    ),
    sharding: Optional[str] = typer.Option(
        None,
        "--sharding",
        "-s",
        help="Sharding strategy (round_robin, hash). Defaults to BENCH_SHARDING.",
    ),
    executor: Optional[str] = typer.Option(
        None,
        "--executor",
        "-e",
        help="Query executor (psycopg, psycopg_pool, asyncpg). Defaults to BENCH_EXECUTOR.",
    ),
    failure_policy: Optional[str] = typer.Option(
        None,
        "--failure-policy",
        help="strict: abort on first failure; tolerant: exclude failed workers.",
    ),
    output_format: str = typer.Option(
        "text",
        "--format",
        help="Report format: text, table or json.",
    ),
) -> None:
    """
    Replay the input queries with N workers and print latency statistics.
    """
    settings = get_settings()
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_logs=settings.log_json)

    try:
        if output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown output format '{output_format}'. Available: {', '.join(OUTPUT_FORMATS)}"
            )
        config = RunConfig(
            worker_count=workers,
            input_path=file,
            sharding=sharding or settings.bench_sharding,
            executor=executor or settings.bench_executor,
            failure_policy=failure_policy or settings.bench_failure_policy,
        )
        result = run_benchmark(config)
    except BenchError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if result.is_empty:
        typer.echo("no input CSV content, exiting", err=True)
        return

    if output_format == "json":
        typer.echo(format_report_json(result))
    elif output_format == "table":
        print_report_table(result)
    else:
        typer.echo(format_report(result))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
