"""
PostgreSQL connection management.

Uses asyncpg for async database operations. The pool is an internal
detail: callers either use ``acquire`` and the query helpers or borrow a
single connection with ``open_connection`` / ``release``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from vectorspace.config.settings import get_settings
from vectorspace.errors import ConfigurationError, VectorStoreConnectionError

logger = logging.getLogger(__name__)

BACKEND_NAME = "pgvector"

_CONNECT_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class Database:
    """
    Async PostgreSQL connection manager.

    Usage:
        db = Database()
        await db.connect()

        async with db.acquire() as conn:
            await conn.execute("INSERT INTO ...")

        await db.close()
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        command_timeout: float | None = None,
        vector_db: str | None = None,
    ):
        """
        Initialize database connection manager.

        Args:
            database_url: PostgreSQL connection URL
            min_size: Minimum pool size
            max_size: Maximum pool size
            command_timeout: Per-statement timeout in seconds
            vector_db: Active vector store selection; must be "pgvector"
        """
        settings = get_settings()

        self._database_url = database_url or settings.postgres_dsn
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._command_timeout = command_timeout or settings.db_command_timeout
        self._vector_db = vector_db or settings.vector_db

        self._pool: asyncpg.Pool | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """
        Establish the connection pool and enable pgvector.

        Safe to call repeatedly; only the first call creates the pool.

        Raises:
            ConfigurationError: If the active vector store is not pgvector
            VectorStoreConnectionError: If the server rejects the connection
        """
        if self._vector_db != BACKEND_NAME:
            raise ConfigurationError(
                f"VECTOR_DB is {self._vector_db!r}; this provider requires {BACKEND_NAME!r}"
            )

        async with self._connect_lock:
            if self._pool is not None:
                return

            try:
                pool = await asyncpg.create_pool(
                    self._database_url,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=self._command_timeout,
                )
            except _CONNECT_ERRORS as e:
                logger.error(f"Failed to connect to database: {e}")
                raise VectorStoreConnectionError(
                    f"Cannot connect to PostgreSQL: {e}"
                ) from e

            try:
                async with pool.acquire() as conn:
                    await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            except _CONNECT_ERRORS as e:
                await pool.close()
                logger.error(f"Failed to enable pgvector extension: {e}")
                raise VectorStoreConnectionError(
                    f"Cannot enable pgvector extension: {e}"
                ) from e

            self._pool = pool
            logger.info(
                f"Database connected (pool: {self._min_size}-{self._max_size})"
            )

    async def close(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection closed")

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raising if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def open_connection(self) -> asyncpg.Connection:
        """
        Borrow a connection from the pool, connecting first if needed.

        The caller owns the handle and must hand it back with release().
        """
        await self.connect()
        try:
            return await self.pool.acquire()
        except _CONNECT_ERRORS as e:
            raise VectorStoreConnectionError(
                f"Cannot acquire PostgreSQL connection: {e}"
            ) from e

    async def release(self, conn: asyncpg.Connection) -> None:
        """Return a connection obtained from open_connection()."""
        await self.pool.release(conn)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection for the duration of the block.

        Usage:
            async with db.acquire() as conn:
                await conn.execute("...")
        """
        conn = await self.open_connection()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)
