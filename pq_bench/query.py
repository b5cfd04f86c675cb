"""
Query construction for host-usage records.

The SQL is a TimescaleDB time-bucketed min/max over the ``cpu_usage``
hypertable. Record values are always sent as bind parameters; the template
only differs in placeholder style between psycopg (``%s``) and asyncpg
(``$n``). Time bounds are bound as text and cast server-side so malformed
timestamps surface as PostgreSQL errors ("invalid input syntax").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

from pq_bench.domain.models import QueryRecord

ParamStyle = Literal["psycopg", "asyncpg"]

_TEMPLATE = (
    "SELECT time_bucket('1 minute', ts), MIN(usage), MAX(usage) "
    "FROM cpu_usage "
    "WHERE host = {0} AND ts BETWEEN {1}::text::timestamptz AND {2}::text::timestamptz "
    "GROUP BY 1"
)


@dataclass(frozen=True)
class HostUsageQuery:
    """A rendered-on-demand query plus its bind parameters."""

    params: Tuple[str, str, str]

    def render(self, paramstyle: ParamStyle = "psycopg") -> str:
        if paramstyle == "asyncpg":
            placeholders = [f"${n}" for n in range(1, len(self.params) + 1)]
        else:
            placeholders = ["%s"] * len(self.params)
        return _TEMPLATE.format(*placeholders)

    @property
    def sql(self) -> str:
        return self.render("psycopg")

    def describe(self) -> str:
        """Human-readable form for logs and error messages (values inlined)."""
        return _TEMPLATE.format(*(f"'{value}'" for value in self.params))


def build_query(record: QueryRecord) -> HostUsageQuery:
    return HostUsageQuery(params=(record.key, record.range_start, record.range_end))


__all__ = ["HostUsageQuery", "ParamStyle", "build_query"]
