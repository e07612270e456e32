import asyncio

import pytest

from pmd_dx_api.clients.database_client import DatabaseClient, SubQuery
from pmd_dx_api.errors import QueryError


@pytest.mark.asyncio
async def test_fetch_wraps_database_errors(database, fake_pool):
    fake_pool.answer("FROM ability", ConnectionRefusedError("db down"))

    with pytest.raises(QueryError) as excinfo:
        await database.fetch("SELECT * FROM ability", label="ability list")

    assert excinfo.value.label == "ability list"
    assert isinstance(excinfo.value.cause, ConnectionRefusedError)


@pytest.mark.asyncio
async def test_count(database, fake_pool):
    fake_pool.answer("COUNT(*) FROM camp", 12)

    assert await database.count("camp") == 12
    assert fake_pool.queries[-1][0] == "SELECT COUNT(*) FROM camp;"


@pytest.mark.asyncio
async def test_fetch_concurrently_returns_results_in_query_order(database, fake_pool):
    fake_pool.answer("FROM a", [{"n": 1}])
    fake_pool.answer("FROM b", [{"n": 2}, {"n": 3}])
    fake_pool.answer("FROM c", [])

    results = await database.fetch_concurrently(
        [SubQuery("a", "SELECT n FROM a"), SubQuery("b", "SELECT n FROM b"), SubQuery("c", "SELECT n FROM c")]
    )

    assert results == [[{"n": 1}], [{"n": 2}, {"n": 3}], []]


@pytest.mark.asyncio
async def test_fetch_concurrently_passes_arguments(database, fake_pool):
    fake_pool.answer("FROM a", lambda key: [{"key": key}])

    results = await database.fetch_concurrently([SubQuery("a", "SELECT * FROM a", (25,))])

    assert results == [[{"key": 25}]]


@pytest.mark.asyncio
async def test_fetch_concurrently_is_all_or_nothing(database, fake_pool):
    fake_pool.answer("FROM a", [{"n": 1}])
    fake_pool.answer("FROM b", ConnectionResetError("connection lost"))

    with pytest.raises(QueryError) as excinfo:
        await database.fetch_concurrently(
            [SubQuery("a", "SELECT n FROM a"), SubQuery("b", "SELECT n FROM b")]
        )

    assert excinfo.value.label == "b"


class SlowPool:
    """Records how many fetches are in flight at the same time."""

    def __init__(self):
        self.in_flight = 0
        self.peak = 0

    async def fetch(self, sql, *args):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return [{"sql": sql}]


@pytest.mark.asyncio
async def test_fetch_concurrently_runs_queries_in_parallel():
    pool = SlowPool()
    database = DatabaseClient(pool)

    await database.fetch_concurrently([SubQuery(str(i), f"SELECT {i}") for i in range(4)])

    assert pool.peak == 4


class FailingSlowPool(SlowPool):
    def __init__(self):
        super().__init__()
        self.finished = 0

    async def fetch(self, sql, *args):
        if sql == "fail":
            raise OSError("boom")
        await asyncio.sleep(1)
        self.finished += 1
        return []


@pytest.mark.asyncio
async def test_failure_cancels_remaining_queries():
    pool = FailingSlowPool()
    database = DatabaseClient(pool)

    with pytest.raises(QueryError):
        await database.fetch_concurrently([SubQuery("slow", "slow"), SubQuery("fail", "fail")])

    assert pool.finished == 0
