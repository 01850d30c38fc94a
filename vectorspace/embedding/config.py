"""
Embedding provider configuration.

Settings for the OpenAI-compatible embedding endpoint used to vectorize
document chunks and search queries.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingConfig(BaseSettings):
    """
    Configuration for the HTTP embedding provider.

    Settings can be overridden via environment variables prefixed with EMBEDDING_.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of an OpenAI-compatible API (POST {base_url}/v1/embeddings)",
    )
    model: str = Field(
        default="nomic-embed-text",
        description="Embedding model name sent with each request",
    )
    api_key: str | None = Field(
        default=None,
        description="Bearer token, if the endpoint requires one",
    )
    max_chunk_length: int | None = Field(
        default=None,
        ge=1,
        description="Largest passage (characters) the model should receive; "
        "unset means the vector store default applies",
    )
    batch_size: int = Field(
        default=32,
        ge=1,
        le=512,
        description="Texts per embedding request",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="HTTP timeout per request",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries on 429/5xx and transport errors",
    )
    max_backoff_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="Cap on exponential backoff between retries",
    )
