"""
Namespace listing, statistics and administrative delete.
"""

import structlog
from fastapi import APIRouter, Depends

from vectorspace.api.dependencies import get_provider
from vectorspace.api.models import (
    ErrorResponse,
    MessageResponse,
    NamespaceItem,
    NamespaceListResponse,
    NamespaceStatsResponse,
    VectorCountResponse,
)
from vectorspace.vectorstore.base import VectorDBProvider

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/namespaces")


@router.get("", response_model=NamespaceListResponse, summary="List namespaces")
async def list_namespaces(
    provider: VectorDBProvider = Depends(get_provider),
) -> NamespaceListResponse:
    descriptors = await provider.list_namespaces()
    items = [
        NamespaceItem(
            name=d.name,
            table=d.table,
            dimension=d.dimension,
            vector_count=d.row_count,
        )
        for d in descriptors
    ]
    return NamespaceListResponse(namespaces=items, total=len(items))


@router.get(
    "/count",
    response_model=VectorCountResponse,
    summary="Total vectors across namespaces",
)
async def vector_count(
    provider: VectorDBProvider = Depends(get_provider),
) -> VectorCountResponse:
    return VectorCountResponse(vector_count=await provider.total_vector_count())


@router.get(
    "/{name}",
    response_model=NamespaceStatsResponse,
    responses={404: {"model": ErrorResponse, "description": "Namespace not found"}},
    summary="Namespace statistics",
)
async def namespace_stats(
    name: str,
    provider: VectorDBProvider = Depends(get_provider),
) -> NamespaceStatsResponse:
    stats = await provider.namespace_stats(name)
    return NamespaceStatsResponse(**stats.to_dict())


@router.delete(
    "/{name}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Namespace not found"}},
    summary="Delete a namespace and all of its vectors",
)
async def delete_namespace(
    name: str,
    provider: VectorDBProvider = Depends(get_provider),
) -> MessageResponse:
    result = await provider.remove_namespace(name)
    logger.info("Namespace delete requested", namespace=name, message=result["message"])
    return MessageResponse(message=result["message"])
