"""API request/response schemas and streaming event models."""

from kbcopilot.models.common import ErrorResponse
from kbcopilot.models.document import (
    ChunkResponse,
    DeleteDocumentResponse,
    DocumentContentResponse,
    DocumentListResponse,
    DocumentSummaryResponse,
    FileIngestResult,
    FileUploadResponse,
    IngestResponse,
    TextUploadRequest,
)
from kbcopilot.models.streaming import (
    DONE_MARKER,
    ClientChatEvent,
    ClientEventType,
    StreamEvent,
    StreamEventType,
)

__all__ = [
    "ErrorResponse",
    "ChunkResponse",
    "DeleteDocumentResponse",
    "DocumentContentResponse",
    "DocumentListResponse",
    "DocumentSummaryResponse",
    "FileIngestResult",
    "FileUploadResponse",
    "IngestResponse",
    "TextUploadRequest",
    "DONE_MARKER",
    "ClientChatEvent",
    "ClientEventType",
    "StreamEvent",
    "StreamEventType",
]
