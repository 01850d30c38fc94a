"""
Namespace-scoped vector storage and similarity search.

Main components:
- VectorDBProvider: Abstract base class defining the provider interface
- PgVectorProvider: PostgreSQL + pgvector implementation
- get_vector_db_provider: Select the provider for the active settings
- similarity helpers: distance conversion, threshold filtering, curation
"""

from vectorspace.vectorstore.base import (
    DeleteOutcome,
    DeleteResult,
    IngestResult,
    NamespaceDescriptor,
    NamespaceStats,
    SearchResponse,
    VectorDBProvider,
    VectorRecord,
)
from vectorspace.vectorstore.config import VectorStoreConfig
from vectorspace.vectorstore.factory import get_vector_db_provider
from vectorspace.vectorstore.pgvector_store import PgVectorProvider
from vectorspace.vectorstore.similarity import (
    ThresholdPolicy,
    curate_sources,
    distance_to_similarity,
    filter_by_threshold,
)

__all__ = [
    "DeleteOutcome",
    "DeleteResult",
    "IngestResult",
    "NamespaceDescriptor",
    "NamespaceStats",
    "PgVectorProvider",
    "SearchResponse",
    "ThresholdPolicy",
    "VectorDBProvider",
    "VectorRecord",
    "VectorStoreConfig",
    "curate_sources",
    "distance_to_similarity",
    "filter_by_threshold",
    "get_vector_db_provider",
]
