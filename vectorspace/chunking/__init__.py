"""Text chunking for ingestion."""

from vectorspace.chunking.splitter import (
    RecursiveCharacterTextSplitter,
    TextSplitter,
    to_chunks,
)

__all__ = ["RecursiveCharacterTextSplitter", "TextSplitter", "to_chunks"]
