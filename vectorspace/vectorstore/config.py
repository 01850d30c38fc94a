"""
Configuration for vector store operations.

Uses Pydantic BaseSettings for environment variable support.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vectorspace.vectorstore.similarity import ThresholdPolicy

# pgvector distance operators
DISTANCE_OPERATORS = {
    "cosine": "<=>",
    "l2": "<->",
}


class VectorStoreConfig(BaseSettings):
    """
    Configuration for PgVectorProvider.

    All settings can be overridden via environment variables with
    VECTORSTORE_ prefix (e.g., VECTORSTORE_DEFAULT_TOP_N=8).
    """

    # Physical layout
    table_prefix: str = Field(
        default="vtb_",
        pattern=r"^[a-z_][a-z0-9_]*$",
        description="Prefix for per-namespace tables",
    )

    # Search defaults
    default_threshold: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Default minimum similarity threshold",
    )
    default_top_n: int = Field(
        default=4,
        ge=1,
        le=1000,
        description="Default number of nearest neighbors to fetch",
    )
    distance_metric: Literal["cosine", "l2"] = Field(
        default="cosine",
        description="Distance operator used for nearest-neighbor ordering",
    )
    threshold_policy: ThresholdPolicy = Field(
        default=ThresholdPolicy.COLLECT,
        description="collect: keep every qualifying row; truncate: stop at the first miss",
    )

    # Ingestion
    default_chunk_size: int = Field(
        default=1000,
        ge=1,
        description="Chunk size when the embedder does not declare one",
    )
    chunk_overlap: int = Field(
        default=20,
        ge=0,
        description="Characters shared by consecutive chunks",
    )
    cache_batch_size: int = Field(
        default=500,
        ge=1,
        description="Records per batch in cached bundles",
    )

    model_config = SettingsConfigDict(env_prefix="VECTORSTORE_")

    @property
    def distance_operator(self) -> str:
        return DISTANCE_OPERATORS[self.distance_metric]
