"""
Pytest configuration for pq-bench.

Provides fixtures for:
- Settings override for integration tests
- Database connection management (skipped when no database is reachable)
- Seeding the cpu_usage table and a matching query-parameter CSV
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import psycopg
import pytest

from pq_bench.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Make env changes made by a test visible to get_settings()."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "homework"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def timescale_available(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the timescaledb extension (time_bucket) is usable, else skip.
    """
    try:
        with db_connection.cursor() as cur:
            cur.execute("CREATE EXTENSION IF NOT EXISTS timescaledb;")
            cur.execute("SELECT time_bucket('1 minute', now());")
    except psycopg.Error as exc:
        pytest.skip(f"timescaledb not available: {exc}")
    return True


@pytest.fixture(scope="function")
def seeded_cpu_usage(
    db_connection: psycopg.Connection, timescale_available: bool
) -> Generator[list[str], None, None]:
    """
    Recreate cpu_usage with two hours of per-minute samples for three hosts.

    Returns the seeded host names.
    """
    hosts = ["host_000000", "host_000001", "host_000002"]
    with db_connection.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS cpu_usage;")
        cur.execute(
            "CREATE TABLE cpu_usage (ts TIMESTAMPTZ NOT NULL, host TEXT NOT NULL, usage DOUBLE PRECISION);"
        )
        cur.execute(
            """
            INSERT INTO cpu_usage (ts, host, usage)
            SELECT ts, h, random() * 100
            FROM generate_series(
                '2017-01-01 00:00:00'::timestamptz,
                '2017-01-01 02:00:00'::timestamptz,
                interval '1 minute'
            ) AS ts
            CROSS JOIN unnest(%s::text[]) AS h;
            """,
            (hosts,),
        )
    yield hosts
    with db_connection.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS cpu_usage;")


@pytest.fixture
def query_csv(tmp_path: Path) -> Path:
    """
    A small query-parameter CSV (header + 4 lines over 3 hosts).
    """
    path = tmp_path / "query_params.csv"
    path.write_text(
        "hostname,start_time,end_time\n"
        "host_000000,2017-01-01 00:00:00,2017-01-01 01:00:00\n"
        "host_000000,2017-01-01 00:30:00,2017-01-01 01:30:00\n"
        "host_000001,2017-01-01 00:00:00,2017-01-01 01:00:00\n"
        "host_000002,2017-01-01 01:00:00,2017-01-01 02:00:00\n",
        encoding="utf-8",
    )
    return path
