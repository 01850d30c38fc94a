"""Tests for DocumentVectorRepository."""

from unittest.mock import AsyncMock

import pytest

from vectorspace.storage.mappings import DocumentVectorMapping, DocumentVectorRepository


@pytest.fixture
def mock_database() -> AsyncMock:
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    return db


@pytest.fixture
def mappings() -> list[DocumentVectorMapping]:
    return [
        DocumentVectorMapping(doc_id="doc-1", vector_id="v-1"),
        DocumentVectorMapping(doc_id="doc-1", vector_id="v-2"),
    ]


class TestDocumentVectorRepository:
    @pytest.mark.asyncio
    async def test_create_table(self, mock_database):
        await DocumentVectorRepository(mock_database).create_table()

        sql = mock_database.execute.call_args.args[0]
        assert "CREATE TABLE IF NOT EXISTS document_vectors" in sql
        assert "idx_document_vectors_doc_id" in sql

    @pytest.mark.asyncio
    async def test_bulk_insert_uses_unnest(self, mock_database, mappings):
        count = await DocumentVectorRepository(mock_database).bulk_insert(mappings)

        assert count == 2
        sql, doc_ids, vector_ids = mock_database.execute.call_args.args
        assert "unnest" in sql
        assert doc_ids == ["doc-1", "doc-1"]
        assert vector_ids == ["v-1", "v-2"]

    @pytest.mark.asyncio
    async def test_bulk_insert_on_given_connection(self, mock_database, mappings):
        conn = AsyncMock()

        await DocumentVectorRepository(mock_database).bulk_insert(mappings, connection=conn)

        conn.execute.assert_called_once()
        mock_database.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_insert_empty(self, mock_database):
        assert await DocumentVectorRepository(mock_database).bulk_insert([]) == 0
        mock_database.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_vector_ids_for(self, mock_database):
        mock_database.fetch.return_value = [{"vector_id": "v-1"}, {"vector_id": "v-2"}]

        ids = await DocumentVectorRepository(mock_database).vector_ids_for("doc-1")

        assert ids == ["v-1", "v-2"]
        assert mock_database.fetch.call_args.args[1] == "doc-1"

    @pytest.mark.asyncio
    async def test_delete_for_document(self, mock_database):
        mock_database.fetch.return_value = [{"id": 1}, {"id": 2}, {"id": 3}]

        assert await DocumentVectorRepository(mock_database).delete_for_document("doc-1") == 3
