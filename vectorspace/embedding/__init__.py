"""
Embedding providers.

- EmbeddingProvider: Abstract interface consumed by the vector store
- OpenAICompatibleEmbedder: HTTP client for OpenAI-style /v1/embeddings
- EmbeddingConfig: Settings for the HTTP provider
"""

from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.embedding.client import OpenAICompatibleEmbedder
from vectorspace.embedding.config import EmbeddingConfig

__all__ = ["EmbeddingConfig", "EmbeddingProvider", "OpenAICompatibleEmbedder"]
