"""
Document service orchestrator.

Coordinates document upload, listing, replacement and deletion on top of
the ingestion pipeline and the vector store.

Dependencies: kbcopilot.core, kbcopilot.boundary.vdb
System role: Document management orchestration
"""

import logging
import math
import uuid
from pathlib import PurePath

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.core.exceptions import (
    DocumentNotFoundError,
    UnsupportedFileTypeError,
    ValidationError,
)
from kbcopilot.core.ingestion_pipeline import IngestionPipeline
from kbcopilot.models.document import (
    ChunkResponse,
    DocumentContentResponse,
    DocumentListResponse,
    DocumentSummaryResponse,
    FileIngestResult,
)

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = [".txt", ".md", ".markdown"]


class DocumentService:
    """
    Document service orchestrator.

    Document IDs for new uploads are random UUIDs; replacement keeps the
    caller's ID.
    """

    def __init__(self, pipeline: IngestionPipeline, vector_store: VectorStore) -> None:
        """
        Initialize document service.

        Args:
            pipeline: Chunk/embed/store pipeline
            vector_store: Store used for listing and deletion
        """
        self._pipeline = pipeline
        self._vector_store = vector_store

    async def ingest_text(self, text: str) -> tuple[str, int]:
        """
        Ingest pasted text as a new document.

        Returns:
            tuple[str, int]: New document ID and chunk count
        """
        document_id = str(uuid.uuid4())
        chunk_count = await self._pipeline.ingest(document_id, text)
        return document_id, chunk_count

    async def ingest_files(self, files: list[tuple[str, bytes]]) -> list[FileIngestResult]:
        """
        Ingest uploaded text files, one new document per file.

        Every file is decoded before any is ingested, so a bad file rejects
        the whole upload without storing anything.

        Args:
            files: (original filename, raw content) pairs

        Returns:
            list[FileIngestResult]: Per-file outcome in upload order

        Raises:
            ValidationError: When no files are given or a file is not UTF-8 text
            UnsupportedFileTypeError: When a file extension is not a text format
        """
        if not files:
            raise ValidationError("At least one file is required", field="files")

        decoded: list[tuple[str, str]] = []
        for filename, content in files:
            if PurePath(filename).suffix.lower() not in TEXT_EXTENSIONS:
                raise UnsupportedFileTypeError(filename, TEXT_EXTENSIONS)
            try:
                decoded.append((filename, content.decode("utf-8")))
            except UnicodeDecodeError as e:
                raise ValidationError(
                    f"File is not valid UTF-8 text: {filename}",
                    field="files",
                ) from e

        results = []
        for filename, text in decoded:
            document_id, chunk_count = await self.ingest_text(text)
            results.append(
                FileIngestResult(
                    original_name=filename,
                    document_id=document_id,
                    chunk_count=chunk_count,
                )
            )
        logger.info("Files ingested", extra={"file_count": len(results)})
        return results

    async def replace_document(self, document_id: str, text: str) -> int:
        """Replace a document's content and return the new chunk count."""
        return await self._pipeline.replace(document_id, text)

    async def list_documents(self, page: int = 1, limit: int = 10) -> DocumentListResponse:
        """
        List documents with their chunk counts and first chunk's text.

        Raises:
            ValidationError: When page or limit is below 1
        """
        result = await self._vector_store.list_documents(page=page, page_size=limit)
        return DocumentListResponse(
            page=page,
            limit=limit,
            total_count=result.total,
            total_pages=math.ceil(result.total / limit),
            results=[
                DocumentSummaryResponse(
                    document_id=summary.document_id,
                    chunk_count=summary.chunk_count,
                    text=summary.text,
                )
                for summary in result.documents
            ],
        )

    async def get_document_content(
        self,
        document_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> DocumentContentResponse:
        """
        Return one page of a document's chunks.

        full_text is set only when the first page already holds every chunk.

        Raises:
            ValidationError: When page or limit is below 1
            DocumentNotFoundError: When the document has no chunks
        """
        result = await self._vector_store.list_chunks(document_id, page=page, page_size=limit)
        if result.total == 0:
            raise DocumentNotFoundError(document_id)

        full_text = None
        if page == 1 and len(result.chunks) == result.total:
            full_text = "\n\n".join(chunk.text for chunk in result.chunks)

        return DocumentContentResponse(
            document_id=document_id,
            page=page,
            limit=limit,
            total_count=result.total,
            total_pages=math.ceil(result.total / limit),
            chunks=[
                ChunkResponse(id=chunk.id, chunk_index=chunk.chunk_index, text=chunk.text)
                for chunk in result.chunks
            ],
            full_text=full_text,
        )

    async def delete_document(self, document_id: str) -> int:
        """
        Delete every chunk of a document.

        Returns:
            int: Number of chunks deleted

        Raises:
            DocumentNotFoundError: When nothing was deleted
        """
        deleted = await self._vector_store.delete_document(document_id)
        if deleted == 0:
            raise DocumentNotFoundError(document_id)
        logger.info("Document deleted", extra={"document_id": document_id, "deleted": deleted})
        return deleted
