"""Pytest fixtures for vectorstore tests.

FakePgConnection keeps namespace tables in memory and answers the
statements PgVectorProvider issues, so provider behavior can be tested
end to end without PostgreSQL.
"""

import copy
import json
import math
import re
from typing import Any
from unittest.mock import MagicMock

import asyncpg
import pytest

from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.vectorstore.config import VectorStoreConfig
from vectorspace.vectorstore.pgvector_store import PgVectorProvider

_QUOTED = re.compile(r'"([^"]+)"')


def _table_in(sql: str) -> str:
    return _QUOTED.search(sql).group(1)


def _cosine_distance(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return 1.0 - dot / norm


def _l2_distance(a: list[float], b: list[float]) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


class FakeTransaction:
    """Snapshot on enter, restore on error."""

    def __init__(self, conn: "FakePgConnection"):
        self._conn = conn
        self._snapshot: Any = None

    async def __aenter__(self) -> "FakeTransaction":
        self._snapshot = (
            copy.deepcopy(self._conn.tables),
            list(self._conn.mappings),
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self._conn.tables, self._conn.mappings = self._snapshot
        return False


class FakePgConnection:
    """In-memory stand-in for an asyncpg connection."""

    def __init__(self) -> None:
        # table -> {"dimension": int, "rows": {id: (vector, metadata_json)}}
        self.tables: dict[str, dict[str, Any]] = {}
        self.mappings: list[tuple[str, str]] = []
        self.mapping_table_created = False
        self.reject_ids: set[str] = set()
        self.fail_drop = False
        self.drop_before_search = False
        self.statements: list[str] = []

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    async def execute(self, sql: str, *args: Any) -> str:
        self.statements.append(sql)

        if "CREATE EXTENSION" in sql:
            return "CREATE EXTENSION"
        if "CREATE TABLE IF NOT EXISTS document_vectors" in sql:
            self.mapping_table_created = True
            return "CREATE TABLE"
        if "CREATE TABLE IF NOT EXISTS" in sql:
            table = _table_in(sql)
            dimension = int(re.search(r"vector\((\d+)\)", sql).group(1))
            self.tables.setdefault(table, {"dimension": dimension, "rows": {}})
            return "CREATE TABLE"
        if "INSERT INTO document_vectors" in sql:
            doc_ids, vector_ids = args
            self.mappings.extend(zip(doc_ids, vector_ids))
            return f"INSERT 0 {len(doc_ids)}"
        if sql.lstrip().startswith("INSERT INTO"):
            table = _table_in(sql)
            if table not in self.tables:
                raise asyncpg.UndefinedTableError(f'relation "{table}" does not exist')
            record_id, vector, metadata = args
            if record_id in self.reject_ids:
                raise asyncpg.DataError(f"rejected {record_id}")
            self.tables[table]["rows"][record_id] = (json.loads(vector), metadata)
            return "INSERT 0 1"
        if sql.startswith("DROP TABLE"):
            if self.fail_drop:
                raise asyncpg.InsufficientPrivilegeError("must be owner of table")
            self.tables.pop(_table_in(sql), None)
            return "DROP TABLE"
        if sql.startswith("DELETE FROM"):
            rows = self.tables[_table_in(sql)]["rows"]
            for vector_id in args[0]:
                rows.pop(vector_id, None)
            return "DELETE"
        raise AssertionError(f"unexpected execute: {sql}")

    async def fetchval(self, sql: str, *args: Any) -> Any:
        self.statements.append(sql)

        if sql.strip() == "SELECT 1":
            return 1
        if "SELECT EXISTS" in sql:
            return args[0] in self.tables
        if "atttypmod" in sql:
            table = self.tables.get(args[0])
            return table["dimension"] if table else None
        if "COUNT(*)" in sql:
            return len(self.tables[_table_in(sql)]["rows"])
        raise AssertionError(f"unexpected fetchval: {sql}")

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self.statements.append(sql)

        if "reltuples" in sql:
            table = self.tables.get(args[0])
            if table is None:
                return None
            return {
                "row_estimate": len(table["rows"]),
                "total_bytes": 8192 * (1 + len(table["rows"])),
                "dimension": table["dimension"],
            }
        raise AssertionError(f"unexpected fetchrow: {sql}")

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.statements.append(sql)

        if "FROM pg_tables" in sql:
            prefix = args[0].rstrip("%").replace("\\_", "_")
            return [{"tablename": t} for t in sorted(self.tables) if t.startswith(prefix)]
        if "SELECT vector_id FROM document_vectors" in sql:
            return [{"vector_id": v} for d, v in self.mappings if d == args[0]]
        if "DELETE FROM document_vectors" in sql:
            removed = [m for m in self.mappings if m[0] == args[0]]
            self.mappings = [m for m in self.mappings if m[0] != args[0]]
            return [{"id": i} for i, _ in enumerate(removed)]
        if "ORDER BY embedding" in sql:
            table = _table_in(sql)
            if self.drop_before_search:
                self.tables.pop(table, None)
            if table not in self.tables:
                raise asyncpg.UndefinedTableError(f'relation "{table}" does not exist')
            query = json.loads(args[0])
            distance = _cosine_distance if "<=>" in sql else _l2_distance
            rows = [
                {"id": rid, "metadata": meta, "distance": distance(vec, query)}
                for rid, (vec, meta) in self.tables[table]["rows"].items()
            ]
            rows.sort(key=lambda r: r["distance"])
            return rows[: args[1]]
        raise AssertionError(f"unexpected fetch: {sql}")


class FakeDatabase:
    """Hands out a single FakePgConnection and counts borrow/return."""

    def __init__(self, conn: FakePgConnection):
        self.conn = conn
        self.borrowed = 0
        self.released = 0
        self.closed = False

    async def connect(self) -> None:
        pass

    async def open_connection(self) -> FakePgConnection:
        self.borrowed += 1
        return self.conn

    async def release(self, conn: FakePgConnection) -> None:
        self.released += 1

    async def execute(self, sql: str, *args: Any) -> str:
        return await self.conn.execute(sql, *args)

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return await self.conn.fetch(sql, *args)

    async def close(self) -> None:
        self.closed = True


class LetterEmbedder(EmbeddingProvider):
    """Deterministic embedder: letter frequencies plus a constant component."""

    dimension = 27

    def __init__(self, max_chunk_length: int | None = None):
        self.max_chunk_length = max_chunk_length
        self.chunk_calls = 0
        self.query_calls = 0

    def _vector(self, text: str) -> list[float]:
        counts = [0.0] * 26
        for ch in text.lower():
            if "a" <= ch <= "z":
                counts[ord(ch) - ord("a")] += 1.0
        return counts + [1.0]

    async def embed_text_input(self, text: str) -> list[float]:
        self.query_calls += 1
        return self._vector(text)

    async def embed_chunks(self, texts: list[str]) -> list[list[float]]:
        self.chunk_calls += 1
        return [self._vector(t) for t in texts]


@pytest.fixture
def fake_conn() -> FakePgConnection:
    return FakePgConnection()


@pytest.fixture
def fake_db(fake_conn) -> FakeDatabase:
    return FakeDatabase(fake_conn)


@pytest.fixture
def embedder() -> LetterEmbedder:
    return LetterEmbedder()


@pytest.fixture
def mock_metrics() -> MagicMock:
    return MagicMock()


@pytest.fixture
def vector_store_config() -> VectorStoreConfig:
    """Default vector store configuration for tests."""
    return VectorStoreConfig(table_prefix="vtb_")


@pytest.fixture
def provider(fake_db, embedder, mock_metrics, vector_store_config) -> PgVectorProvider:
    return PgVectorProvider(
        database=fake_db,
        embedder=embedder,
        config=vector_store_config,
        metrics=mock_metrics,
    )


@pytest.fixture
def sample_records():
    """Three 4-dimensional records."""
    from vectorspace.vectorstore.base import VectorRecord

    return [
        VectorRecord(id="rec-1", vector=[1.0, 0.0, 0.0, 0.0], metadata={"text": "alpha"}),
        VectorRecord(id="rec-2", vector=[0.0, 1.0, 0.0, 0.0], metadata={"text": "beta"}),
        VectorRecord(id="rec-3", vector=[0.0, 0.0, 1.0, 0.0], metadata={"text": "gamma"}),
    ]
