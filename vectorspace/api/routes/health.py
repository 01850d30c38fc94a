"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vectorspace.api.dependencies import get_provider
from vectorspace.api.models import HealthResponse
from vectorspace.vectorstore.base import VectorDBProvider

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Store unreachable"}},
    summary="Vector store heartbeat",
)
async def health_check(
    provider: VectorDBProvider = Depends(get_provider),
) -> HealthResponse | JSONResponse:
    """Round-trip the vector store and report its latency."""
    start = time.perf_counter()
    try:
        beat = await provider.heartbeat()
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.warning("Heartbeat failed", error=str(e))
        body = HealthResponse(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            error=str(e),
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    latency_ms = (time.perf_counter() - start) * 1000
    return HealthResponse(
        status="healthy",
        heartbeat=beat["heartbeat"],
        latency_ms=round(latency_ms, 2),
    )
