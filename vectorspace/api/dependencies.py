"""
Dependency injection for FastAPI endpoints.
"""

from vectorspace.cache.factory import create_vector_cache
from vectorspace.config.settings import get_settings
from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.embedding.client import OpenAICompatibleEmbedder
from vectorspace.vectorstore.base import VectorDBProvider
from vectorspace.vectorstore.factory import get_vector_db_provider

# Global service instances (initialized on first request)
_embedder: EmbeddingProvider | None = None
_provider: VectorDBProvider | None = None


async def get_embedder() -> EmbeddingProvider:
    """Get the shared embedding client."""
    global _embedder

    if _embedder is None:
        _embedder = OpenAICompatibleEmbedder()

    return _embedder


async def get_provider() -> VectorDBProvider:
    """
    Get the vector database provider.

    Creates a singleton wired to the shared embedder and the configured
    vector cache.
    """
    global _provider

    if _provider is None:
        settings = get_settings()
        _provider = get_vector_db_provider(
            settings,
            embedder=await get_embedder(),
            cache=create_vector_cache(settings=settings),
        )

    return _provider


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _embedder, _provider

    if _provider is not None:
        await _provider.close()
        _provider = None

    if _embedder is not None:
        await _embedder.close()
        _embedder = None
