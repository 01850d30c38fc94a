"""
Abstract base class and data models for vector database providers.

Defines the interface every backend must implement, plus the shared
data structures for namespaces, writes, ingestion and search.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from vectorspace.embedding.base import EmbeddingProvider


@dataclass
class VectorRecord:
    """
    One embedding to be written into a namespace.

    Attributes:
        id: Record identifier (uuid4 string, at most 40 characters)
        vector: Embedding values
        metadata: Arbitrary JSON-serializable metadata; must carry "text"
            for search to reconstruct the passage
    """

    id: str
    vector: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NamespaceDescriptor:
    """A namespace as known to the registry."""

    name: str
    table: str
    dimension: int | None = None
    row_count: int = 0


@dataclass(frozen=True)
class NamespaceStats:
    """
    Catalog statistics for a namespace table.

    Attributes:
        name: Namespace name
        table: Physical table name
        dimension: Vector column dimension
        row_estimate: Planner row estimate (pg_class.reltuples)
        total_bytes: Table size including indexes and TOAST
    """

    name: str
    table: str
    dimension: int | None
    row_estimate: int
    total_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "table": self.table,
            "dimension": self.dimension,
            "row_estimate": self.row_estimate,
            "total_bytes": self.total_bytes,
        }


class DeleteOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_ABSENT = "already_absent"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of an idempotent namespace delete."""

    outcome: DeleteOutcome
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        """Absent namespaces count as deleted."""
        return self.outcome is not DeleteOutcome.FAILED


@dataclass(frozen=True)
class IngestResult:
    """Outcome of add_document."""

    vectorized: bool
    error: str | None = None


@dataclass
class SearchResponse:
    """
    Result of a similarity search.

    Attributes:
        context_texts: Passage texts, nearest first
        sources: Stored metadata plus "text" and "score", aligned with
            context_texts
        message: Explanation when the search could not run, else False
    """

    context_texts: list[str] = field(default_factory=list)
    sources: list[dict[str, Any]] = field(default_factory=list)
    message: str | bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "contextTexts": self.context_texts,
            "sources": self.sources,
            "message": self.message,
        }


class VectorDBProvider(ABC):
    """
    Abstract base class for vector database providers.

    Every operation that touches the store accepts an optional
    ``connection``; when omitted the provider borrows one and returns it
    on every exit path.
    """

    name: str = ""

    # Connection management

    @abstractmethod
    async def connect(self) -> Any:
        """Validate configuration and return a live connection handle."""
        ...

    @abstractmethod
    async def release(self, connection: Any) -> None:
        """Return a handle obtained from connect()."""
        ...

    @abstractmethod
    async def heartbeat(self) -> dict[str, int]:
        """Round-trip the store; returns {"heartbeat": epoch_millis}."""
        ...

    async def initialize(self) -> None:
        """Prepare backing storage. Default is a no-op."""

    async def close(self) -> None:
        """Release pooled resources. Default is a no-op."""

    # Namespace registry

    @abstractmethod
    async def list_namespaces(self, connection: Any = None) -> list[NamespaceDescriptor]:
        ...

    @abstractmethod
    async def namespace_exists(self, name: str, connection: Any = None) -> bool:
        ...

    async def has_namespace(self, name: str | None) -> bool:
        """Like namespace_exists, but an empty name is simply absent."""
        if not name:
            return False
        return await self.namespace_exists(name)

    @abstractmethod
    async def total_vector_count(self) -> int:
        ...

    @abstractmethod
    async def namespace_vector_count(self, name: str) -> int:
        ...

    @abstractmethod
    async def describe_namespace(
        self, name: str, connection: Any = None
    ) -> NamespaceStats | None:
        ...

    @abstractmethod
    async def namespace_stats(self, name: str) -> NamespaceStats:
        """Stats for an existing namespace; raises NamespaceNotFoundError."""
        ...

    @abstractmethod
    async def delete_namespace(self, name: str, connection: Any = None) -> DeleteResult:
        ...

    @abstractmethod
    async def remove_namespace(self, name: str) -> dict[str, str]:
        """Admin delete; raises NamespaceNotFoundError when absent."""
        ...

    # Writing

    @abstractmethod
    async def upsert_collection(
        self,
        records: list[VectorRecord],
        namespace: str,
        connection: Any = None,
    ) -> int:
        ...

    @abstractmethod
    async def add_document(
        self,
        namespace: str,
        document: Mapping[str, Any],
        full_file_path: str | None = None,
    ) -> IngestResult:
        ...

    @abstractmethod
    async def delete_document(self, namespace: str, doc_id: str) -> bool:
        ...

    # Querying

    @abstractmethod
    async def search(
        self,
        namespace: str,
        query: str,
        embedder: EmbeddingProvider,
        threshold: float | None = None,
        top_n: int | None = None,
    ) -> SearchResponse:
        """Nearest passages to ``query``; defaults come from configuration (0.25 and 4)."""
        ...
