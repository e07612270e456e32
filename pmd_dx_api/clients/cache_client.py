import json
import logging
from dataclasses import dataclass

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class CacheMissError(Exception):
    """No cache entry exists for the key. Not a failure."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"no cache entry for key '{key}'")


@dataclass
class CachedResponse:
    headers: dict[str, list[str]]
    body: bytes


class ResponseCache:
    """Stores whole HTTP responses in Redis, keyed by request URL.

    Each entry is a hash with a ``header`` field (JSON encoded header lists)
    and a ``json`` field (raw body). No TTL is set: eviction is left to the
    server's memory policy.
    """

    EVICTION_POLICY = "allkeys-lfu"

    def __init__(self, redis_client: aioredis.Redis):
        self.redis = redis_client

    @classmethod
    async def connect(cls, redis_url: str, password: str | None = None) -> "ResponseCache":
        """Connect to a ``host:port`` address, check it and set the eviction policy."""
        client = aioredis.Redis.from_url(f"redis://{redis_url}", password=password or None)
        await client.ping()
        await client.config_set("maxmemory-policy", cls.EVICTION_POLICY)
        logger.info("Redis connection established")
        return cls(client)

    async def get_response(self, key: str) -> CachedResponse:
        """Raises CacheMissError when nothing is stored under key."""
        header_bytes, body = await self.redis.hmget(key, ["header", "json"])
        if not header_bytes and not body:
            raise CacheMissError(key)
        headers = json.loads(header_bytes) if header_bytes else {}
        return CachedResponse(headers=headers, body=body or b"")

    async def store_response(self, key: str, headers: dict[str, list[str]], body: bytes):
        await self.redis.hset(key, mapping={"header": json.dumps(headers), "json": body})

    async def close(self):
        """Close Redis connection (call on app shutdown)."""
        await self.redis.aclose()
