"""
Configuration for the vector cache.

Uses Pydantic BaseSettings for environment variable support.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorCacheConfig(BaseSettings):
    """
    Where re-ingestion bundles live.

    All settings can be overridden via environment variables with
    VECTOR_CACHE_ prefix (e.g., VECTOR_CACHE_BACKEND=redis).
    """

    backend: Literal["file", "redis", "none"] = Field(
        default="file",
        description="Cache backend: a directory of JSON files, Redis, or disabled",
    )
    directory: str = Field(
        default="storage/vector-cache",
        description="Directory for the file backend",
    )
    key_prefix: str = Field(
        default="vector-cache:",
        description="Key prefix for the Redis backend",
    )
    ttl_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Expiry for Redis entries; unset keeps them indefinitely",
    )

    model_config = SettingsConfigDict(env_prefix="VECTOR_CACHE_")
