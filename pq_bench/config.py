"""
Configuration settings for pq-bench.

Uses Pydantic Settings to load environment variables for database connections,
logging, and benchmark defaults. Command-line options override the benchmark
defaults on a per-run basis.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upper bound on concurrent workers (and therefore on open connections).
MAX_WORKERS = 50


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("homework", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(0, alias="DB_STATEMENT_TIMEOUT_MS")
    db_connect_attempts: int = Field(1, ge=1, alias="DB_CONNECT_ATTEMPTS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    bench_sharding: str = Field("round_robin", alias="BENCH_SHARDING")
    bench_executor: str = Field("psycopg", alias="BENCH_EXECUTOR")
    bench_failure_policy: str = Field("strict", alias="BENCH_FAILURE_POLICY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def build_dsn(settings: Optional[Settings] = None, redact: bool = False) -> str:
    """Compose a libpq URL from settings (optionally with the password masked)."""
    settings = settings or get_settings()
    password = "***" if redact else settings.db_password
    return (
        f"postgresql://{settings.db_user}:{password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


__all__ = ["MAX_WORKERS", "Settings", "build_dsn", "get_settings"]
