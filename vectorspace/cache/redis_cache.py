"""Redis-backed vector cache."""

import json
from typing import Any

import redis.asyncio as redis
import structlog

from vectorspace.cache.base import CachedVectors, VectorCache, cache_key_for

logger = structlog.get_logger(__name__)


class RedisVectorCache(VectorCache):
    """
    Stores each bundle as a JSON string under ``<prefix><uuid5(path)>``.

    Read failures are logged and treated as misses: ingestion then
    re-embeds instead of failing.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "vector-cache:",
        ttl_seconds: int | None = None,
    ):
        self._redis = redis_client
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, path: str) -> str:
        return f"{self._prefix}{cache_key_for(path)}"

    async def cached(self, path: str) -> CachedVectors:
        if not path:
            return CachedVectors()

        key = self._key(path)
        try:
            raw = await self._redis.get(key)
        except redis.RedisError as e:
            logger.warning("Vector cache lookup failed", key=key, error=str(e))
            return CachedVectors()

        if not raw:
            return CachedVectors()

        try:
            chunks = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt vector cache entry", key=key, error=str(e))
            return CachedVectors()

        logger.debug("Vector cache hit", key=key)
        return CachedVectors(exists=True, chunks=chunks)

    async def store(self, chunks: list[list[dict[str, Any]]], path: str) -> None:
        if not path:
            return

        key = self._key(path)
        payload = json.dumps(chunks)
        if self._ttl:
            await self._redis.setex(key, self._ttl, payload)
        else:
            await self._redis.set(key, payload)
        logger.debug("Stored vector cache bundle", key=key)

    async def purge(self, path: str) -> None:
        await self._redis.delete(self._key(path))
