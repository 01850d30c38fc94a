"""
Text splitting for document ingestion.

Splits page content into bounded-size passages that overlap by a fixed
number of characters, preferring to break on paragraph, line and word
boundaries.
"""

from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_SEPARATORS = ("\n\n", "\n", ". ", " ")


class TextSplitter(ABC):
    """Abstract base class for text splitters."""

    @abstractmethod
    def split_text(self, text: str) -> list[str]:
        """Split text into chunks."""
        raise NotImplementedError


class RecursiveCharacterTextSplitter(TextSplitter):
    """
    Character-window splitter with separator-aware break points.

    Every chunk is at most ``chunk_size`` characters. Consecutive chunks
    share exactly ``chunk_overlap`` characters: the next window starts
    ``chunk_overlap`` characters before the previous one ended. Inside a
    window the splitter tries each separator in order and breaks just
    after its last occurrence in the back half of the window; when none
    is found it cuts at the window edge.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 20,
        separators: tuple[str, ...] = DEFAULT_SEPARATORS,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap must be >= 0")
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be < chunk_size")

        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._separators = tuple(s for s in separators if s)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    def split_text(self, text: str) -> list[str]:
        if not text:
            return []
        if len(text) <= self._chunk_size:
            return [text]

        chunks: list[str] = []
        length = len(text)
        start = 0

        while True:
            end = min(start + self._chunk_size, length)
            if end < length:
                end = self._break_point(text, start, end)

            chunks.append(text[start:end])
            if end >= length:
                break
            start = end - self._chunk_overlap

        logger.debug(
            "Split text into chunks",
            chunks=len(chunks),
            chunk_size=self._chunk_size,
            overlap=self._chunk_overlap,
        )
        return chunks

    def _break_point(self, text: str, start: int, end: int) -> int:
        """Pick where the window starting at ``start`` should end.

        The result is always greater than ``start + chunk_overlap`` so the
        next window makes progress.
        """
        floor = max(start + self._chunk_overlap + 1, start + self._chunk_size // 2)
        for separator in self._separators:
            idx = text.rfind(separator, floor, end)
            if idx != -1:
                return idx + len(separator)
        return end


def to_chunks(items: list, size: int) -> list[list]:
    """Partition ``items`` into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError("size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]
