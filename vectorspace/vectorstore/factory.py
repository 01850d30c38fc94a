"""Select the vector database provider for the active configuration."""

from vectorspace.cache.base import VectorCache
from vectorspace.config.settings import Settings, get_settings
from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.errors import ConfigurationError
from vectorspace.storage.database import Database
from vectorspace.vectorstore.base import VectorDBProvider
from vectorspace.vectorstore.config import VectorStoreConfig
from vectorspace.vectorstore.pgvector_store import PgVectorProvider

SUPPORTED_BACKENDS = ("pgvector",)


def get_vector_db_provider(
    settings: Settings | None = None,
    embedder: EmbeddingProvider | None = None,
    cache: VectorCache | None = None,
    config: VectorStoreConfig | None = None,
) -> VectorDBProvider:
    """
    Build the provider named by ``settings.vector_db``.

    Raises:
        ConfigurationError: If the backend is not supported
    """
    settings = settings or get_settings()

    if settings.vector_db == "pgvector":
        database = Database(
            database_url=settings.postgres_dsn,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
            vector_db=settings.vector_db,
        )
        return PgVectorProvider(
            database=database,
            embedder=embedder,
            cache=cache,
            config=config,
        )

    raise ConfigurationError(
        f"Unsupported vector database {settings.vector_db!r}; "
        f"expected one of {', '.join(SUPPORTED_BACKENDS)}"
    )
