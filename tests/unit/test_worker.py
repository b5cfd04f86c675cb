from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

import pytest

from pq_bench.domain.models import QueryRecord, Shard, ShardResult
from pq_bench.engine.worker import run_shard
from pq_bench.errors import ExecutorConnectionError, QueryError, WorkerCancelled
from pq_bench.query import HostUsageQuery

EXPECTED_QUERIES = 3


class _FakeExecutor:
    name = "fake"
    description = "records executed queries"

    def __init__(self, fail_on: Optional[str] = None, refuse_connect: bool = False) -> None:
        self.fail_on = fail_on
        self.refuse_connect = refuse_connect
        self.executed: List[HostUsageQuery] = []
        self.opened = 0
        self.closed = 0

    @contextmanager
    def connect(self) -> Iterator[object]:
        if self.refuse_connect:
            raise ExecutorConnectionError("connection to database failed: refused")
        self.opened += 1
        try:
            yield object()
        finally:
            self.closed += 1

    def execute(self, conn: object, query: HostUsageQuery) -> list:
        if query.params[1] == self.fail_on:
            raise QueryError("query failed: boom", sql=query.describe())
        self.executed.append(query)
        return [("2017-01-01 00:00:00", 1.0, 2.0)]


def _shard(index: int = 0, count: int = EXPECTED_QUERIES) -> Shard:
    return Shard(
        index=index,
        records=tuple(
            QueryRecord(key="host_1", range_start=f"s{i}", range_end=f"e{i}") for i in range(count)
        ),
    )


def test_run_shard_executes_in_order_on_one_connection() -> None:
    executor = _FakeExecutor()
    cell = ShardResult(shard_index=0)

    result = run_shard(_shard(), cell, executor)

    assert result is cell
    assert [q.params[1] for q in executor.executed] == ["s0", "s1", "s2"]
    assert executor.opened == 1
    assert executor.closed == 1
    assert cell.query_count == EXPECTED_QUERIES
    assert len(cell.latencies) == EXPECTED_QUERIES
    assert cell.min_latency <= cell.max_latency
    assert cell.total_latency == pytest.approx(sum(cell.latencies))


def test_run_shard_tags_query_error_and_closes_connection() -> None:
    executor = _FakeExecutor(fail_on="s1")
    cell = ShardResult(shard_index=5)

    with pytest.raises(QueryError) as excinfo:
        run_shard(_shard(index=5), cell, executor)

    assert excinfo.value.shard_index == 5
    assert str(excinfo.value).startswith("worker 5: query failed: boom")
    assert "Content: 'SELECT time_bucket" in str(excinfo.value)
    assert executor.closed == 1
    assert cell.query_count == 1


def test_run_shard_tags_connection_error() -> None:
    executor = _FakeExecutor(refuse_connect=True)

    with pytest.raises(ExecutorConnectionError) as excinfo:
        run_shard(_shard(index=2), ShardResult(shard_index=2), executor)

    assert excinfo.value.shard_index == 2
    assert str(excinfo.value) == "worker 2: connection to database failed: refused"


def test_run_shard_stops_when_cancelled() -> None:
    executor = _FakeExecutor()
    cancel = threading.Event()
    cancel.set()
    cell = ShardResult(shard_index=0)

    with pytest.raises(WorkerCancelled):
        run_shard(_shard(), cell, executor, cancel)

    assert executor.executed == []
    assert cell.is_empty
    assert executor.closed == 1


def test_run_shard_rejects_foreign_result_cell() -> None:
    with pytest.raises(ValueError, match="result cell 1"):
        run_shard(_shard(index=0), ShardResult(shard_index=1), _FakeExecutor())
