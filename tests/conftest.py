import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis

from pmd_dx_api.clients import DatabaseClient, ResponseCache


class FakePool:
    """Stands in for an asyncpg pool.

    Queries are answered by the first registered SQL fragment they contain.
    An answer is a result, an exception to raise, or a callable receiving the
    query arguments.
    """

    def __init__(self):
        self._answers = []
        self.queries = []

    def answer(self, fragment, result):
        self._answers.append((fragment, result))

    def _lookup(self, sql, args, default):
        self.queries.append((sql, args))
        for fragment, result in self._answers:
            if fragment in sql:
                if isinstance(result, Exception):
                    raise result
                return result(*args) if callable(result) else result
        return default

    async def fetch(self, sql, *args):
        return self._lookup(sql, args, [])

    async def fetchval(self, sql, *args):
        return self._lookup(sql, args, 0)

    async def close(self):
        pass


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def database(fake_pool):
    return DatabaseClient(fake_pool)


@pytest.fixture
def fake_redis():
    """Provides a fresh fake Redis instance (with its own server) for each test."""
    return FakeRedis(server=FakeServer())


@pytest.fixture
def response_cache(fake_redis):
    return ResponseCache(fake_redis)
