import asyncio
import logging
from collections.abc import Sequence
from typing import Any, NamedTuple

import asyncpg

from pmd_dx_api.db.queries import build_count_query
from pmd_dx_api.errors import QueryError

logger = logging.getLogger(__name__)

# Errors raised by asyncpg or the network layer beneath it
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class SubQuery(NamedTuple):
    label: str
    sql: str
    args: tuple[Any, ...] = ()


class DatabaseClient:
    """Thin wrapper around an asyncpg pool.

    The pool is safe for concurrent checkout, so no locking happens here.
    Failures are raised once as QueryError and never retried.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @classmethod
    async def connect(cls, dsn: str, min_size: int = 1, max_size: int = 10) -> "DatabaseClient":
        pool = await asyncpg.create_pool(dsn=dsn, min_size=min_size, max_size=max_size)
        logger.info("Database connection pool established")
        return cls(pool)

    async def fetch(self, sql: str, *args: Any, label: str | None = None) -> list[asyncpg.Record]:
        try:
            return await self.pool.fetch(sql, *args)
        except DATABASE_ERRORS as e:
            raise QueryError(label or sql.strip(), e) from e

    async def count(self, table: str) -> int:
        """Unfiltered row count of table, independent of sorting and paging."""
        try:
            return await self.pool.fetchval(build_count_query(table))
        except DATABASE_ERRORS as e:
            raise QueryError(f"count {table}", e) from e

    async def fetch_concurrently(self, queries: Sequence[SubQuery]) -> list[list[asyncpg.Record]]:
        """Runs all queries at once and returns their result sets in order.

        All-or-nothing: if any query fails, the remaining ones are cancelled,
        partial results are discarded and the first failure is raised.
        """
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self.fetch(q.sql, *q.args, label=q.label))
                    for q in queries
                ]
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None
        return [task.result() for task in tasks]

    async def close(self):
        """Close the connection pool (call on app shutdown)."""
        await self.pool.close()
