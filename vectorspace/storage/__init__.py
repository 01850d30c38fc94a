"""Storage layer: connection management and the doc->vector mapping table."""

from vectorspace.storage.database import Database
from vectorspace.storage.mappings import DocumentVectorMapping, DocumentVectorRepository

__all__ = [
    "Database",
    "DocumentVectorMapping",
    "DocumentVectorRepository",
]
