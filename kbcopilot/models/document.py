"""
Document domain models and schemas.

Request/response schemas for uploading, listing, replacing and deleting
knowledge-base documents.

Dependencies: pydantic
System role: Document API contracts
"""

from pydantic import BaseModel, Field


class TextUploadRequest(BaseModel):
    """Request schema for ingesting raw text."""

    text: str = Field(min_length=1, description="Plain text content of the document")


class IngestResponse(BaseModel):
    """Response schema for a single ingested document."""

    message: str
    document_id: str
    chunk_count: int


class FileIngestResult(BaseModel):
    """Outcome of one uploaded file."""

    original_name: str
    document_id: str
    chunk_count: int


class FileUploadResponse(BaseModel):
    """Response schema for multi-file upload."""

    message: str
    results: list[FileIngestResult]


class DocumentSummaryResponse(BaseModel):
    """One row of the document listing: chunk count and first chunk's text."""

    document_id: str
    chunk_count: int
    text: str | None = None


class DocumentListResponse(BaseModel):
    """Paginated document list response."""

    page: int
    limit: int
    total_count: int
    total_pages: int
    results: list[DocumentSummaryResponse]


class ChunkResponse(BaseModel):
    """Stored chunk of a document."""

    id: int
    chunk_index: int
    text: str


class DocumentContentResponse(BaseModel):
    """Paginated chunks of one document."""

    document_id: str
    page: int
    limit: int
    total_count: int
    total_pages: int
    chunks: list[ChunkResponse]
    full_text: str | None = Field(
        default=None,
        description="All chunks joined by blank lines, present only when this page holds every chunk",
    )


class DeleteDocumentResponse(BaseModel):
    """Response schema for document deletion."""

    message: str
    deleted_chunks: int
