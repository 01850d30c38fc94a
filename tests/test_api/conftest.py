"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from vectorspace.api.app import create_app
from vectorspace.api.dependencies import get_embedder, get_provider
from vectorspace.vectorstore.base import (
    IngestResult,
    NamespaceDescriptor,
    NamespaceStats,
    SearchResponse,
)


@pytest.fixture
def mock_provider() -> AsyncMock:
    """Mock VectorDBProvider."""
    provider = AsyncMock()
    provider.heartbeat = AsyncMock(return_value={"heartbeat": 1760000000000})
    provider.list_namespaces = AsyncMock(
        return_value=[
            NamespaceDescriptor(name="docs", table="vtb_docs", dimension=768, row_count=12),
            NamespaceDescriptor(name="notes", table="vtb_notes", dimension=768, row_count=3),
        ]
    )
    provider.total_vector_count = AsyncMock(return_value=15)
    provider.namespace_stats = AsyncMock(
        return_value=NamespaceStats(
            name="docs", table="vtb_docs", dimension=768, row_estimate=12, total_bytes=65536
        )
    )
    provider.remove_namespace = AsyncMock(
        return_value={"message": "Namespace docs was deleted along with 12 vectors."}
    )
    provider.add_document = AsyncMock(return_value=IngestResult(vectorized=True))
    provider.delete_document = AsyncMock(return_value=True)
    provider.search = AsyncMock(
        return_value=SearchResponse(
            context_texts=["pgvector stores embeddings"],
            sources=[{"text": "pgvector stores embeddings", "title": "Intro", "score": 0.91}],
        )
    )
    return provider


@pytest.fixture
def mock_embedder() -> MagicMock:
    return MagicMock()


@pytest.fixture
def app(mock_provider, mock_embedder):
    app = create_app()
    app.dependency_overrides[get_provider] = lambda: mock_provider
    app.dependency_overrides[get_embedder] = lambda: mock_embedder
    return app


@pytest.fixture
def client(app):
    """FastAPI TestClient with dependency overrides."""
    with TestClient(app) as c:
        yield c
