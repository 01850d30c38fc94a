"""
Similarity search endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from vectorspace.api.dependencies import get_embedder, get_provider
from vectorspace.api.models import ErrorResponse, SearchRequest, SearchResponse
from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.vectorstore.base import VectorDBProvider

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/namespaces/{name}/search",
    response_model=SearchResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Invalid query or dimension mismatch"},
        503: {"model": ErrorResponse, "description": "Namespace temporarily unavailable"},
    },
    summary="Find passages similar to a query",
    description="""
    Embeds the query and returns the nearest stored passages whose
    similarity (0.0-1.0, higher is closer) meets the threshold.

    Searching a namespace that does not exist is not an error: the
    response is empty and `message` explains why.
    """,
)
async def search_namespace(
    name: str,
    body: SearchRequest,
    provider: VectorDBProvider = Depends(get_provider),
    embedder: EmbeddingProvider = Depends(get_embedder),
) -> SearchResponse:
    start_time = time.perf_counter()

    result = await provider.search(
        name,
        body.query,
        embedder,
        threshold=body.threshold,
        top_n=body.top_n,
    )

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Search completed",
        namespace=name,
        query_length=len(body.query),
        results_count=len(result.sources),
        latency_ms=round(latency_ms, 2),
    )

    return SearchResponse(
        context_texts=result.context_texts,
        sources=result.sources,
        message=result.message,
        latency_ms=round(latency_ms, 2),
    )
