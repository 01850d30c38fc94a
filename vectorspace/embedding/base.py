"""Abstract base class for embedding providers."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Produces float vectors from text.

    Implementations must return one vector per input text, all of the
    same length.
    """

    #: Largest passage, in characters, the provider wants to receive.
    #: None lets the caller pick its own default.
    max_chunk_length: int | None = None

    @abstractmethod
    async def embed_text_input(self, text: str) -> list[float]:
        """Embed a single query string."""
        raise NotImplementedError

    @abstractmethod
    async def embed_chunks(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of passages, preserving order."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release network resources. Default is a no-op."""
