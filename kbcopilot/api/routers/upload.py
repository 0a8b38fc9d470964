"""
Knowledge-base document API endpoints.

Routes:
- POST /upload/text - Ingest pasted text as a new document
- POST /upload/file - Ingest uploaded text files, one document each
- GET /upload/content - List documents
- GET /upload/content/{document_id} - Page through a document's chunks
- DELETE /upload/content/{document_id} - Delete a document
- PUT /upload/content/{document_id} - Replace a document's text

Errors raised by the service are mapped to HTTP responses by the
application's exception handlers.

Dependencies: kbcopilot.application.services.document_service
System role: Document management HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from kbcopilot.api.deps import get_document_service
from kbcopilot.application.services import DocumentService
from kbcopilot.models.document import (
    DeleteDocumentResponse,
    DocumentContentResponse,
    DocumentListResponse,
    FileUploadResponse,
    IngestResponse,
    TextUploadRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["documents"])


@router.post("/text", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def upload_text(
    request: TextUploadRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> IngestResponse:
    """
    Chunk, embed and store pasted text.

    Args:
        request: Body with the document text
        document_service: Injected DocumentService

    Returns:
        IngestResponse: New document ID and chunk count
    """
    document_id, chunk_count = await document_service.ingest_text(request.text)
    return IngestResponse(message="Text embedded", document_id=document_id, chunk_count=chunk_count)


@router.post("/file", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_files(
    files: list[UploadFile] = File(...),
    document_service: DocumentService = Depends(get_document_service),
) -> FileUploadResponse:
    """
    Ingest uploaded UTF-8 text files (.txt, .md, .markdown).

    Args:
        files: Multipart files
        document_service: Injected DocumentService

    Returns:
        FileUploadResponse: Per-file document IDs and chunk counts
    """
    payload = []
    for upload in files:
        payload.append((upload.filename or "", await upload.read()))
        await upload.close()

    results = await document_service.ingest_files(payload)
    return FileUploadResponse(message="Files processed", results=results)


@router.get("/content", response_model=DocumentListResponse)
async def list_documents(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List documents with chunk counts and each document's first chunk."""
    return await document_service.list_documents(page=page, limit=limit)


@router.get("/content/{document_id}", response_model=DocumentContentResponse)
async def get_document_content(
    document_id: str,
    page: int = Query(default=1),
    limit: int = Query(default=10),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentContentResponse:
    """
    Page through one document's chunks in index order.

    Raises:
        DocumentNotFoundError: Mapped to 404 when the document has no chunks
    """
    return await document_service.get_document_content(document_id, page=page, limit=limit)


@router.delete("/content/{document_id}", response_model=DeleteDocumentResponse)
async def delete_document(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> DeleteDocumentResponse:
    """Delete every chunk of a document."""
    deleted = await document_service.delete_document(document_id)
    return DeleteDocumentResponse(message="Document deleted", deleted_chunks=deleted)


@router.put("/content/{document_id}", response_model=IngestResponse)
async def replace_document(
    document_id: str,
    request: TextUploadRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> IngestResponse:
    """Delete a document's chunks and ingest the new text under the same ID."""
    chunk_count = await document_service.replace_document(document_id, request.text)
    return IngestResponse(message="Document updated", document_id=document_id, chunk_count=chunk_count)
