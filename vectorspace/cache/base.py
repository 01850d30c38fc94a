"""Vector cache interface and shared data structures."""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CachedVectors:
    """
    Previously computed chunk vectors for one source file.

    Attributes:
        exists: Whether a bundle was found
        chunks: Batches of chunk dicts, each with "values" and "metadata"
    """

    exists: bool = False
    chunks: list[list[dict[str, Any]]] = field(default_factory=list)

    @property
    def vector_count(self) -> int:
        return sum(len(batch) for batch in self.chunks)


def cache_key_for(path: str) -> str:
    """Stable name for a file path (uuid5 in the URL namespace)."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, path))


class VectorCache(ABC):
    """Stores chunk vectors per source file so re-ingestion skips embedding."""

    @abstractmethod
    async def cached(self, path: str) -> CachedVectors:
        """Look up the bundle for ``path``; ``exists`` is False on a miss."""
        raise NotImplementedError

    @abstractmethod
    async def store(self, chunks: list[list[dict[str, Any]]], path: str) -> None:
        """Persist the bundle for ``path``, replacing any previous one."""
        raise NotImplementedError

    async def purge(self, path: str) -> None:
        """Forget the bundle for ``path``. Default is a no-op."""
