"""
Vector cache for re-ingestion.

- VectorCache: Abstract interface
- FileVectorCache: One JSON file per source path
- RedisVectorCache: One Redis key per source path
- create_vector_cache: Build the configured backend
"""

from vectorspace.cache.base import CachedVectors, VectorCache, cache_key_for
from vectorspace.cache.config import VectorCacheConfig
from vectorspace.cache.factory import create_vector_cache
from vectorspace.cache.file_cache import FileVectorCache
from vectorspace.cache.redis_cache import RedisVectorCache

__all__ = [
    "CachedVectors",
    "FileVectorCache",
    "RedisVectorCache",
    "VectorCache",
    "VectorCacheConfig",
    "cache_key_for",
    "create_vector_cache",
]
