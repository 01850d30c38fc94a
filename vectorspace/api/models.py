"""
Pydantic models for API request/response validation.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall status: healthy or unhealthy",
    )
    heartbeat: int | None = Field(
        default=None,
        description="Store round-trip time as epoch milliseconds",
    )
    latency_ms: float | None = Field(
        default=None,
        description="Time taken by the heartbeat",
    )
    error: str | None = Field(
        default=None,
        description="Failure reason when unhealthy",
    )


# Namespace models


class NamespaceItem(BaseModel):
    name: str
    table: str
    dimension: int | None = None
    vector_count: int = 0


class NamespaceListResponse(BaseModel):
    namespaces: list[NamespaceItem]
    total: int


class VectorCountResponse(BaseModel):
    vector_count: int = Field(
        ...,
        description="Vectors across all namespaces",
    )


class NamespaceStatsResponse(BaseModel):
    name: str
    table: str
    dimension: int | None = None
    row_estimate: int
    total_bytes: int


class MessageResponse(BaseModel):
    message: str


# Document models


class AddDocumentRequest(BaseModel):
    """Request model for adding a document to a namespace."""

    doc_id: str = Field(
        ...,
        min_length=1,
        description="Caller's identifier for the document",
    )
    page_content: str = Field(
        default="",
        description="Full document text",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra fields copied onto every chunk",
    )
    full_file_path: str | None = Field(
        default=None,
        description="Source path; enables the vector cache",
    )


class AddDocumentResponse(BaseModel):
    vectorized: bool
    error: str | None = None


class DeleteDocumentResponse(BaseModel):
    deleted: bool


# Search models


class SearchRequest(BaseModel):
    """Request model for similarity search."""

    query: str = Field(
        ...,
        min_length=1,
        description="Text to find similar passages for",
    )
    threshold: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Minimum similarity score (server default when omitted)",
    )
    top_n: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Nearest neighbors to fetch (server default when omitted)",
    )


class SearchResponse(BaseModel):
    """Response model for similarity search."""

    context_texts: list[str]
    sources: list[dict[str, Any]]
    message: str | bool = False
    latency_ms: float | None = None
