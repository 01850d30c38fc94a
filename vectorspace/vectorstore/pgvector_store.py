"""
pgvector implementation of the VectorDBProvider interface.

Each namespace is a table ``<prefix><name>`` with columns
``(id VARCHAR(40), embedding vector(dim), metadata JSONB)``. The table is
created on first write and sized to that write's embedding length.
"""

import asyncio
import json
import time
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

import asyncpg
import structlog

from vectorspace.cache.base import VectorCache
from vectorspace.chunking.splitter import (
    RecursiveCharacterTextSplitter,
    TextSplitter,
    to_chunks,
)
from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.errors import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    InvalidArgumentError,
    NamespaceNotFoundError,
    NamespaceUnavailableError,
    VectorStoreConnectionError,
    VectorWriteError,
)
from vectorspace.observability.metrics import MetricsCollector, get_metrics
from vectorspace.storage.database import Database
from vectorspace.storage.mappings import DocumentVectorMapping, DocumentVectorRepository
from vectorspace.vectorstore.base import (
    DeleteOutcome,
    DeleteResult,
    IngestResult,
    NamespaceDescriptor,
    NamespaceStats,
    SearchResponse,
    VectorDBProvider,
    VectorRecord,
)
from vectorspace.vectorstore.config import VectorStoreConfig
from vectorspace.vectorstore.similarity import (
    curate_sources,
    distance_to_similarity,
    filter_by_threshold,
)

logger = structlog.get_logger(__name__)

NAMESPACE_ABSENT_MESSAGE = "Invalid query - no documents found for workspace!"

# PostgreSQL truncates identifiers beyond this many bytes
MAX_IDENTIFIER_BYTES = 63

_NAMESPACE_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
)

_CREATE_NAMESPACE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id          VARCHAR(40) PRIMARY KEY,
    embedding   vector({dimension}) NOT NULL,
    metadata    JSONB
)
"""

_UPSERT_SQL = """
INSERT INTO {table} (id, embedding, metadata)
VALUES ($1, $2::vector, $3::jsonb)
ON CONFLICT (id) DO UPDATE SET
    embedding = EXCLUDED.embedding,
    metadata = EXCLUDED.metadata
"""

_SEARCH_SQL = """
SELECT id, metadata, embedding {op} $1::vector AS distance
FROM {table}
ORDER BY embedding {op} $1::vector
LIMIT $2
"""

_DIMENSION_SQL = """
SELECT a.atttypmod
FROM pg_attribute a
JOIN pg_class c ON c.oid = a.attrelid
JOIN pg_namespace n ON n.oid = c.relnamespace
WHERE c.relname = $1
  AND n.nspname = current_schema()
  AND a.attname = 'embedding'
  AND a.attnum > 0
"""

_STATS_SQL = """
SELECT
    c.reltuples::bigint AS row_estimate,
    pg_total_relation_size(c.oid) AS total_bytes,
    a.atttypmod AS dimension
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_attribute a
    ON a.attrelid = c.oid AND a.attname = 'embedding' AND a.attnum > 0
WHERE c.relname = $1
  AND n.nspname = current_schema()
  AND c.relkind = 'r'
"""


def quote_identifier(name: str) -> str:
    """Double-quote a SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def vector_literal(values: list[float]) -> str:
    """Format an embedding in pgvector's text input format."""
    return f"[{','.join(str(float(x)) for x in values)}]"


def _decode_metadata(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        return json.loads(raw)
    return dict(raw)


class PgVectorProvider(VectorDBProvider):
    """
    Namespace-scoped vector store on PostgreSQL + pgvector.

    Holds no connection between calls. Schema creation is serialized per
    namespace inside this process; across processes
    ``CREATE TABLE IF NOT EXISTS`` keeps it safe.
    """

    name = "pgvector"

    def __init__(
        self,
        database: Database | None = None,
        embedder: EmbeddingProvider | None = None,
        cache: VectorCache | None = None,
        mappings: DocumentVectorRepository | None = None,
        config: VectorStoreConfig | None = None,
        splitter: TextSplitter | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the provider.

        Args:
            database: Connection manager (created from settings if omitted)
            embedder: Embedding provider used for ingestion
            cache: Optional vector cache for re-ingesting known files
            mappings: Document-to-vector mapping repository
            config: Vector store configuration
            splitter: Override the default chunker
            metrics: Metrics collector (global one if omitted)
        """
        self._db = database or Database()
        self._embedder = embedder
        self._cache = cache
        self._mappings = mappings or DocumentVectorRepository(self._db)
        self._config = config or VectorStoreConfig()
        self._splitter = splitter
        self._metrics = metrics or get_metrics()

        self._descriptors: dict[str, NamespaceDescriptor] = {}
        self._schema_locks: dict[str, asyncio.Lock] = {}
        self._mappings_ready = False

    @property
    def config(self) -> VectorStoreConfig:
        return self._config

    @property
    def database(self) -> Database:
        return self._db

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    async def connect(self) -> asyncpg.Connection:
        """
        Open (or reuse) the pool and borrow a connection.

        Raises:
            ConfigurationError: If the active backend is not pgvector
            VectorStoreConnectionError: If authentication or handshake fails
        """
        return await self._db.open_connection()

    async def release(self, connection: asyncpg.Connection) -> None:
        await self._db.release(connection)

    async def heartbeat(self) -> dict[str, int]:
        conn = await self.connect()
        try:
            await conn.fetchval("SELECT 1")
        finally:
            await self.release(conn)
        return {"heartbeat": int(time.time() * 1000)}

    async def close(self) -> None:
        await self._db.close()

    @asynccontextmanager
    async def _connection(
        self, connection: asyncpg.Connection | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Yield the caller's connection, or borrow one for the block."""
        if connection is not None:
            yield connection
            return
        conn = await self.connect()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def initialize(self) -> None:
        """Connect and create the document mapping table."""
        await self._db.connect()
        await self._ensure_mapping_table()

    async def _ensure_mapping_table(self) -> None:
        if not self._mappings_ready:
            await self._mappings.create_table()
            self._mappings_ready = True

    # ------------------------------------------------------------------
    # Namespace registry
    # ------------------------------------------------------------------

    def table_name(self, namespace: str) -> str:
        """
        Physical table name for a namespace.

        Raises:
            InvalidArgumentError: If the name is empty, has characters
                outside [A-Za-z0-9_-], or is too long for an identifier
        """
        if not namespace:
            raise InvalidArgumentError("namespace is required")
        if not set(namespace) <= _NAMESPACE_CHARS:
            raise InvalidArgumentError(
                f"Invalid namespace {namespace!r}: use letters, digits, '_' or '-'"
            )
        table = f"{self._config.table_prefix}{namespace}"
        if len(table.encode("utf-8")) > MAX_IDENTIFIER_BYTES:
            raise InvalidArgumentError(
                f"Namespace {namespace!r} is too long "
                f"(table name limit is {MAX_IDENTIFIER_BYTES} bytes)"
            )
        return table

    def _table_like_pattern(self) -> str:
        prefix = self._config.table_prefix.replace("\\", "\\\\").replace("_", "\\_")
        return f"{prefix}%"

    async def _table_dimension(
        self, conn: asyncpg.Connection, table: str
    ) -> int | None:
        typmod = await conn.fetchval(_DIMENSION_SQL, table)
        if typmod is None or typmod < 0:
            return None
        return int(typmod)

    def _remember(self, namespace: str, table: str, **changes: Any) -> None:
        current = self._descriptors.get(namespace) or NamespaceDescriptor(
            name=namespace, table=table
        )
        self._descriptors[namespace] = replace(current, **changes)

    def cached_descriptor(self, namespace: str) -> NamespaceDescriptor | None:
        """Last known descriptor for a namespace, without a round-trip."""
        return self._descriptors.get(namespace)

    async def list_namespaces(
        self, connection: asyncpg.Connection | None = None
    ) -> list[NamespaceDescriptor]:
        """Every namespace table in the current schema, with row counts."""
        prefix_len = len(self._config.table_prefix)
        async with self._connection(connection) as conn:
            rows = await conn.fetch(
                "SELECT tablename FROM pg_tables "
                "WHERE schemaname = current_schema() AND tablename LIKE $1 "
                "ORDER BY tablename",
                self._table_like_pattern(),
            )

            descriptors = []
            for row in rows:
                table = row["tablename"]
                name = table[prefix_len:]
                descriptor = NamespaceDescriptor(
                    name=name,
                    table=table,
                    dimension=await self._table_dimension(conn, table),
                    row_count=await self.row_count(table, conn),
                )
                self._descriptors[name] = descriptor
                descriptors.append(descriptor)

        return descriptors

    async def namespace_exists(
        self, name: str, connection: asyncpg.Connection | None = None
    ) -> bool:
        table = self.table_name(name)
        async with self._connection(connection) as conn:
            exists = await conn.fetchval(
                "SELECT EXISTS (SELECT 1 FROM pg_tables "
                "WHERE schemaname = current_schema() AND tablename = $1)",
                table,
            )
        if not exists:
            self._descriptors.pop(name, None)
        return bool(exists)

    async def row_count(
        self, table: str, connection: asyncpg.Connection | None = None
    ) -> int:
        """Exact number of rows in a namespace table."""
        async with self._connection(connection) as conn:
            count = await conn.fetchval(f"SELECT COUNT(*) FROM {quote_identifier(table)}")
        return int(count or 0)

    async def total_vector_count(self) -> int:
        return sum(d.row_count for d in await self.list_namespaces())

    async def namespace_vector_count(self, name: str) -> int:
        async with self._connection() as conn:
            if not await self.namespace_exists(name, conn):
                return 0
            table = self.table_name(name)
            count = await self.row_count(table, conn)
        self._remember(name, table, row_count=count)
        return count

    async def describe_namespace(
        self, name: str, connection: asyncpg.Connection | None = None
    ) -> NamespaceStats | None:
        """Catalog statistics for a namespace, or None when it does not exist."""
        table = self.table_name(name)
        async with self._connection(connection) as conn:
            row = await conn.fetchrow(_STATS_SQL, table)
        if row is None:
            return None

        dimension = row["dimension"]
        return NamespaceStats(
            name=name,
            table=table,
            dimension=dimension if dimension is not None and dimension >= 0 else None,
            # reltuples is -1 until the table is first analyzed
            row_estimate=max(int(row["row_estimate"] or 0), 0),
            total_bytes=int(row["total_bytes"] or 0),
        )

    async def namespace_stats(self, name: str) -> NamespaceStats:
        stats = await self.describe_namespace(name)
        if stats is None:
            raise NamespaceNotFoundError(name)
        return stats

    async def delete_namespace(
        self, name: str, connection: asyncpg.Connection | None = None
    ) -> DeleteResult:
        """
        Drop a namespace table.

        Idempotent: an absent namespace reports ALREADY_ABSENT. A failed
        DROP reports FAILED with the server's reason instead of raising.
        """
        table = self.table_name(name)
        async with self._connection(connection) as conn:
            if not await self.namespace_exists(name, conn):
                return DeleteResult(DeleteOutcome.ALREADY_ABSENT)
            try:
                await conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table)}")
            except asyncpg.PostgresError as e:
                logger.error("Failed to drop namespace", namespace=name, error=str(e))
                return DeleteResult(DeleteOutcome.FAILED, reason=str(e))

        self._descriptors.pop(name, None)
        logger.info("Dropped namespace", namespace=name, table=table)
        return DeleteResult(DeleteOutcome.SUCCESS)

    async def remove_namespace(self, name: str) -> dict[str, str]:
        """
        Administrative delete.

        Raises:
            NamespaceNotFoundError: If the namespace does not exist
        """
        async with self._connection() as conn:
            if not await self.namespace_exists(name, conn):
                raise NamespaceNotFoundError(name)
            vector_count = await self.row_count(self.table_name(name), conn)
            result = await self.delete_namespace(name, conn)

        if not result.succeeded:
            return {"message": f"Failed to delete namespace {name}: {result.reason}"}
        return {
            "message": f"Namespace {name} was deleted along with {vector_count} vectors."
        }

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    async def _ensure_namespace_table(
        self,
        conn: asyncpg.Connection,
        namespace: str,
        dimension: int,
    ) -> str:
        """Create the namespace table if needed and check its dimension."""
        table = self.table_name(namespace)
        lock = self._schema_locks.setdefault(namespace, asyncio.Lock())

        async with lock:
            existing = await self._table_dimension(conn, table)
            if existing is None:
                await conn.execute(
                    _CREATE_NAMESPACE_SQL.format(
                        table=quote_identifier(table), dimension=dimension
                    )
                )
                logger.info(
                    "Created namespace table",
                    namespace=namespace,
                    table=table,
                    dimension=dimension,
                )
                # Another process may have won the race with its own dimension
                existing = await self._table_dimension(conn, table) or dimension

        if existing != dimension:
            raise DimensionMismatchError(existing, dimension, namespace=namespace)

        self._remember(namespace, table, dimension=dimension)
        return table

    async def upsert_collection(
        self,
        records: list[VectorRecord],
        namespace: str,
        connection: asyncpg.Connection | None = None,
    ) -> int:
        """
        Insert or update records in a namespace, creating it if needed.

        All records are written in one transaction; the first failure rolls
        back the whole batch.

        Returns:
            Number of records written

        Raises:
            InvalidArgumentError: If namespace or records are missing
            DimensionMismatchError: If vector lengths disagree with each
                other or with the existing table
            VectorWriteError: If a record is rejected by the server
            NamespaceUnavailableError: If the table is dropped mid-write
        """
        if not namespace:
            raise InvalidArgumentError("namespace is required")
        if not records:
            raise InvalidArgumentError("records must not be empty")

        dimension = len(records[0].vector)
        if dimension == 0:
            raise InvalidArgumentError("vectors must not be empty")
        for i, record in enumerate(records):
            if len(record.vector) != dimension:
                raise DimensionMismatchError(
                    dimension, len(record.vector), index=i, namespace=namespace
                )

        async with self._connection(connection) as conn:
            table = await self._ensure_namespace_table(conn, namespace, dimension)
            sql = _UPSERT_SQL.format(table=quote_identifier(table))

            async with conn.transaction():
                for i, record in enumerate(records):
                    try:
                        await conn.execute(
                            sql,
                            record.id,
                            vector_literal(record.vector),
                            json.dumps(record.metadata),
                        )
                    except asyncpg.UndefinedTableError as e:
                        raise NamespaceUnavailableError(namespace) from e
                    except (asyncpg.PostgresError, TypeError, ValueError) as e:
                        raise VectorWriteError(i, record.id, str(e)) from e

        self._metrics.record_vectors_written(len(records))
        logger.debug("Upserted vectors", namespace=namespace, count=len(records))
        return len(records)

    # ------------------------------------------------------------------
    # Document ingestion
    # ------------------------------------------------------------------

    def _require_embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            raise ConfigurationError("No embedding provider configured for ingestion")
        return self._embedder

    def _splitter_for(self, embedder: EmbeddingProvider) -> TextSplitter:
        if self._splitter is not None:
            return self._splitter
        return RecursiveCharacterTextSplitter(
            chunk_size=embedder.max_chunk_length or self._config.default_chunk_size,
            chunk_overlap=self._config.chunk_overlap,
        )

    async def _write_document(
        self,
        namespace: str,
        doc_id: str,
        records: list[VectorRecord],
    ) -> None:
        """Write records and their doc mappings in one transaction."""
        await self._ensure_mapping_table()
        mappings = [DocumentVectorMapping(doc_id=doc_id, vector_id=r.id) for r in records]

        async with self._connection() as conn:
            # Schema creation stays outside the write transaction
            await self._ensure_namespace_table(conn, namespace, len(records[0].vector))
            async with conn.transaction():
                await self.upsert_collection(records, namespace, connection=conn)
                await self._mappings.bulk_insert(mappings, connection=conn)

    async def add_document(
        self,
        namespace: str,
        document: Mapping[str, Any],
        full_file_path: str | None = None,
    ) -> IngestResult:
        """
        Chunk, embed and store a document.

        ``document`` carries ``page_content``, ``doc_id`` and any other
        keys, which become per-chunk metadata. When ``full_file_path`` has
        a cached bundle the stored vectors are reused and the embedder is
        not called.

        Per-document failures are returned as ``IngestResult(False, error)``.
        Configuration and connection failures are raised.
        """
        try:
            if not namespace:
                raise InvalidArgumentError("namespace is required")

            metadata = dict(document)
            page_content = metadata.pop("page_content", None)
            doc_id = metadata.pop("doc_id", None)

            if not page_content:
                self._metrics.record_document("skipped")
                return IngestResult(vectorized=False)
            if not doc_id:
                raise InvalidArgumentError("document is missing doc_id")

            logger.info("Adding document to namespace", namespace=namespace, doc_id=doc_id)

            if full_file_path and self._cache is not None:
                cached = await self._cache.cached(full_file_path)
                self._metrics.record_cache(hit=cached.exists)
                if cached.exists and cached.vector_count:
                    records = [
                        VectorRecord(
                            id=str(uuid.uuid4()),
                            vector=chunk["values"],
                            metadata=chunk.get("metadata") or {},
                        )
                        for batch in cached.chunks
                        for chunk in batch
                    ]
                    await self._write_document(namespace, doc_id, records)
                    self._metrics.record_document("vectorized")
                    logger.info(
                        "Reused cached vectors",
                        namespace=namespace,
                        doc_id=doc_id,
                        vectors=len(records),
                    )
                    return IngestResult(vectorized=True)

            embedder = self._require_embedder()
            chunks = self._splitter_for(embedder).split_text(page_content)
            logger.debug("Split document", doc_id=doc_id, chunks=len(chunks))

            vectors = await embedder.embed_chunks(chunks)
            if not vectors or len(vectors) != len(chunks):
                raise EmbeddingError(
                    "Could not embed document chunks! This document will not be recorded."
                )

            records = [
                VectorRecord(
                    id=str(uuid.uuid4()),
                    vector=vector,
                    metadata={**metadata, "text": chunk},
                )
                for chunk, vector in zip(chunks, vectors)
            ]
            await self._write_document(namespace, doc_id, records)

            if full_file_path and self._cache is not None:
                bundle = [{"values": r.vector, "metadata": r.metadata} for r in records]
                try:
                    await self._cache.store(
                        to_chunks(bundle, self._config.cache_batch_size), full_file_path
                    )
                except Exception as e:
                    # Vectors and mappings are already committed
                    logger.warning(
                        "Failed to store vector cache",
                        namespace=namespace,
                        doc_id=doc_id,
                        path=full_file_path,
                        error=str(e),
                    )

            self._metrics.record_document("vectorized")
            logger.info(
                "Vectorized document",
                namespace=namespace,
                doc_id=doc_id,
                vectors=len(records),
            )
            return IngestResult(vectorized=True)

        except (ConfigurationError, VectorStoreConnectionError):
            raise
        except Exception as e:
            logger.error(
                "Failed to add document",
                namespace=namespace,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._metrics.record_document("failed")
            return IngestResult(vectorized=False, error=str(e))

    async def delete_document(self, namespace: str, doc_id: str) -> bool:
        """
        Remove a document's vectors and mappings.

        Returns True when nothing is left to delete, including when the
        namespace does not exist.
        """
        if not doc_id:
            raise InvalidArgumentError("doc_id is required")

        async with self._connection() as conn:
            if not await self.namespace_exists(namespace, conn):
                return True

            await self._ensure_mapping_table()
            vector_ids = await self._mappings.vector_ids_for(doc_id, conn)
            if not vector_ids:
                return True

            table = quote_identifier(self.table_name(namespace))
            async with conn.transaction():
                await conn.execute(
                    f"DELETE FROM {table} WHERE id = ANY($1::varchar[])", vector_ids
                )
                await self._mappings.delete_for_document(doc_id, conn)

        logger.info(
            "Deleted document vectors",
            namespace=namespace,
            doc_id=doc_id,
            vectors=len(vector_ids),
        )
        return True

    # ------------------------------------------------------------------
    # Similarity search
    # ------------------------------------------------------------------

    async def search(
        self,
        namespace: str,
        query: str,
        embedder: EmbeddingProvider,
        threshold: float | None = None,
        top_n: int | None = None,
    ) -> SearchResponse:
        """
        Find the passages nearest to ``query`` in a namespace.

        A missing namespace is not an error: the response carries a message
        and no results.

        Raises:
            InvalidArgumentError: If namespace, query or embedder is missing
            DimensionMismatchError: If the query embedding does not fit
            NamespaceUnavailableError: If the table is dropped mid-query
        """
        if not namespace or not query or embedder is None:
            raise InvalidArgumentError(
                "Invalid request to search: namespace, query and embedder are required"
            )

        threshold = self._config.default_threshold if threshold is None else threshold
        if top_n is None:
            top_n = self._config.default_top_n
        if top_n < 1:
            raise InvalidArgumentError(f"top_n must be at least 1, got {top_n}")
        started = time.perf_counter()

        async with self._connection() as conn:
            if not await self.namespace_exists(namespace, conn):
                return SearchResponse(message=NAMESPACE_ABSENT_MESSAGE)
            table = self.table_name(namespace)
            dimension = await self._table_dimension(conn, table)

        query_vector = await embedder.embed_text_input(query)
        if dimension is not None and len(query_vector) != dimension:
            raise DimensionMismatchError(dimension, len(query_vector), namespace=namespace)

        sql = _SEARCH_SQL.format(
            op=self._config.distance_operator, table=quote_identifier(table)
        )
        async with self._connection() as conn:
            try:
                rows = await conn.fetch(sql, vector_literal(query_vector), top_n)
            except asyncpg.UndefinedTableError as e:
                raise NamespaceUnavailableError(namespace) from e

        scored = [
            {
                "id": row["id"],
                "metadata": _decode_metadata(row["metadata"]),
                "score": distance_to_similarity(row["distance"]),
            }
            for row in rows
        ]
        kept = filter_by_threshold(scored, threshold, self._config.threshold_policy)
        context_texts, sources = curate_sources(kept)

        self._metrics.record_search(time.perf_counter() - started, len(sources))
        logger.debug(
            "Similarity search",
            namespace=namespace,
            fetched=len(rows),
            returned=len(sources),
        )
        return SearchResponse(context_texts=context_texts, sources=sources)
