"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vectorspace.api.dependencies import cleanup_dependencies
from vectorspace.api.routes import documents, health, namespaces, search
from vectorspace.errors import (
    ConfigurationError,
    DimensionMismatchError,
    InvalidArgumentError,
    NamespaceNotFoundError,
    NamespaceUnavailableError,
    VectorStoreConnectionError,
    VectorStoreError,
)
from vectorspace.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)

# Seconds a client should wait before retrying a retryable failure
RETRY_AFTER_SECONDS = 1


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Vectorspace API starting up")
    yield
    logger.info("Vectorspace API shutting down")
    await cleanup_dependencies()


def _error(status_code: int, detail: str, error_type: str, **headers: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_type": error_type},
        headers=headers or None,
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    openapi_tags = [
        {"name": "health", "description": "Vector store heartbeat"},
        {"name": "namespaces", "description": "Namespace listing, stats and deletion"},
        {"name": "documents", "description": "Document ingestion and removal"},
        {"name": "search", "description": "Similarity search within a namespace"},
    ]

    app = FastAPI(
        title="Vectorspace API",
        description="""
Namespace-scoped vector storage and similarity search on PostgreSQL + pgvector.

Each namespace is an isolated collection of embedded passages. Documents are
chunked and embedded on ingestion; searches return the nearest passages with
similarity scores between 0.0 and 1.0.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    # Exception handlers
    @app.exception_handler(NamespaceNotFoundError)
    async def not_found_handler(request: Request, exc: NamespaceNotFoundError):
        return _error(404, str(exc), "not_found")

    @app.exception_handler(InvalidArgumentError)
    async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
        return _error(422, str(exc), "invalid_argument")

    @app.exception_handler(DimensionMismatchError)
    async def dimension_handler(request: Request, exc: DimensionMismatchError):
        return _error(422, str(exc), "dimension_mismatch")

    @app.exception_handler(NamespaceUnavailableError)
    async def unavailable_handler(request: Request, exc: NamespaceUnavailableError):
        return _error(
            503,
            str(exc),
            "namespace_unavailable",
            **{"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    @app.exception_handler(VectorStoreConnectionError)
    async def connection_handler(request: Request, exc: VectorStoreConnectionError):
        logger.error("Vector store unreachable", error=str(exc))
        return _error(503, "Vector store unavailable", "connection")

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError):
        logger.error("Vector store misconfigured", error=str(exc))
        return _error(503, "Vector store misconfigured", "configuration")

    @app.exception_handler(VectorStoreError)
    async def store_error_handler(request: Request, exc: VectorStoreError):
        logger.error(f"Vector store error: {exc}", exc_info=True)
        return _error(500, "Vector store error", "vector_store")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error(500, "Internal server error", "internal")

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(namespaces.router, tags=["namespaces"])
    app.include_router(documents.router, tags=["documents"])
    app.include_router(search.router, tags=["search"])

    return app
