"""
Document ingestion and removal within a namespace.
"""

import structlog
from fastapi import APIRouter, Depends

from vectorspace.api.dependencies import get_provider
from vectorspace.api.models import (
    AddDocumentRequest,
    AddDocumentResponse,
    DeleteDocumentResponse,
    ErrorResponse,
)
from vectorspace.vectorstore.base import VectorDBProvider

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/namespaces/{name}/documents")


@router.post(
    "",
    response_model=AddDocumentResponse,
    responses={503: {"model": ErrorResponse, "description": "Store unavailable"}},
    summary="Chunk, embed and store a document",
    description="""
    Splits `page_content` into overlapping chunks, embeds them and stores
    one vector per chunk. `metadata` is copied onto every chunk alongside
    the chunk text.

    When `full_file_path` was ingested before, the cached vectors are
    reused and nothing is re-embedded.

    A document that cannot be vectorized returns `vectorized: false` with
    the reason in `error`.
    """,
)
async def add_document(
    name: str,
    body: AddDocumentRequest,
    provider: VectorDBProvider = Depends(get_provider),
) -> AddDocumentResponse:
    document = {**body.metadata, "page_content": body.page_content, "doc_id": body.doc_id}
    result = await provider.add_document(name, document, full_file_path=body.full_file_path)
    return AddDocumentResponse(vectorized=result.vectorized, error=result.error)


@router.delete(
    "/{doc_id}",
    response_model=DeleteDocumentResponse,
    summary="Remove a document's vectors",
)
async def delete_document(
    name: str,
    doc_id: str,
    provider: VectorDBProvider = Depends(get_provider),
) -> DeleteDocumentResponse:
    deleted = await provider.delete_document(name, doc_id)
    return DeleteDocumentResponse(deleted=deleted)
