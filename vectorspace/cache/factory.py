"""Construct the configured vector cache backend."""

import redis.asyncio as redis

from vectorspace.cache.base import VectorCache
from vectorspace.cache.config import VectorCacheConfig
from vectorspace.cache.file_cache import FileVectorCache
from vectorspace.cache.redis_cache import RedisVectorCache
from vectorspace.config.settings import Settings, get_settings


def create_vector_cache(
    config: VectorCacheConfig | None = None,
    settings: Settings | None = None,
) -> VectorCache | None:
    """
    Build a cache from configuration.

    Returns None when caching is disabled.
    """
    config = config or VectorCacheConfig()
    settings = settings or get_settings()

    if config.backend == "none":
        return None
    if config.backend == "redis":
        client = redis.from_url(str(settings.redis_url), decode_responses=True)
        return RedisVectorCache(
            client,
            key_prefix=config.key_prefix,
            ttl_seconds=config.ttl_seconds,
        )
    return FileVectorCache(config.directory)
