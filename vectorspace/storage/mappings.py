"""Database repository for the document_vectors mapping table."""

import logging
from dataclasses import dataclass

import asyncpg

from vectorspace.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS document_vectors (
    id          BIGSERIAL PRIMARY KEY,
    doc_id      TEXT NOT NULL,
    vector_id   TEXT NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_document_vectors_doc_id
    ON document_vectors(doc_id);
"""

_BULK_INSERT_SQL = """
INSERT INTO document_vectors (doc_id, vector_id)
SELECT * FROM unnest($1::text[], $2::text[])
"""


@dataclass(frozen=True)
class DocumentVectorMapping:
    """Links one logical document to one vector row produced from it."""

    doc_id: str
    vector_id: str


class DocumentVectorRepository:
    """Persistence for doc_id -> vector_id mappings.

    One document maps to many vectors (one per chunk).
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the mapping table and index (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("document_vectors table ensured")

    async def bulk_insert(
        self,
        mappings: list[DocumentVectorMapping],
        connection: asyncpg.Connection | None = None,
    ) -> int:
        """Insert many mappings in one statement.

        Returns the number of mappings written.
        """
        if not mappings:
            return 0

        doc_ids = [m.doc_id for m in mappings]
        vector_ids = [m.vector_id for m in mappings]

        if connection is not None:
            await connection.execute(_BULK_INSERT_SQL, doc_ids, vector_ids)
        else:
            await self._db.execute(_BULK_INSERT_SQL, doc_ids, vector_ids)

        logger.info("Recorded %d document vector mappings", len(mappings))
        return len(mappings)

    async def vector_ids_for(
        self,
        doc_id: str,
        connection: asyncpg.Connection | None = None,
    ) -> list[str]:
        """Vector ids recorded for a document, oldest first."""
        sql = "SELECT vector_id FROM document_vectors WHERE doc_id = $1 ORDER BY id"
        if connection is not None:
            rows = await connection.fetch(sql, doc_id)
        else:
            rows = await self._db.fetch(sql, doc_id)
        return [row["vector_id"] for row in rows]

    async def delete_for_document(
        self,
        doc_id: str,
        connection: asyncpg.Connection | None = None,
    ) -> int:
        """Remove every mapping for a document. Returns rows deleted."""
        sql = "DELETE FROM document_vectors WHERE doc_id = $1 RETURNING id"
        if connection is not None:
            rows = await connection.fetch(sql, doc_id)
        else:
            rows = await self._db.fetch(sql, doc_id)
        return len(rows)
