"""
Document ingestion pipeline.

Turns one document's plain text into stored, queryable chunks:
token count → (whole text | chunker spans) → embed + save per span.

Chunk indexes come from the chunker's output order and are fixed before any
I/O starts; the embed-and-save calls for all spans then run concurrently
in a task group. The first failure cancels the calls still running and
propagates to the caller, so nothing is written after ingest returns.
Chunks already written for the document stay in place; callers that need
all-or-nothing delete the document themselves.

Dependencies: kbcopilot.core, kbcopilot.boundary.vdb
System role: Write path of the knowledge base
"""

import asyncio
import logging
import time

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.core.chunker import TextChunker
from kbcopilot.core.embedder import OpenAIEmbedder
from kbcopilot.core.exceptions import KnowledgeBaseError, ValidationError
from kbcopilot.core.tokenizer import TokenCounter
from kbcopilot.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Chunk, embed and store documents."""

    def __init__(
        self,
        token_counter: TokenCounter,
        chunker: TextChunker,
        embedder: OpenAIEmbedder,
        vector_store: VectorStore,
        max_tokens: int = 1000,
        overlap_tokens: int = 200,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            token_counter: Counter using the embedding model's tokenizer
            chunker: Span splitter
            embedder: Embedding adapter
            vector_store: Chunk store
            max_tokens: Token budget per chunk
            overlap_tokens: Overlap between consecutive chunks
        """
        self._counter = token_counter
        self._chunker = chunker
        self._embedder = embedder
        self._vector_store = vector_store
        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens

    def plan_chunks(self, full_text: str) -> list[str]:
        """
        Decide the document's spans without doing any I/O.

        Args:
            full_text: Document text

        Returns:
            list[str]: Spans in chunk_index order
        """
        if self._counter.count(full_text) <= self.max_tokens:
            return [full_text]
        return self._chunker.split(full_text, self.max_tokens, self.overlap_tokens)

    async def ingest(self, document_id: str, full_text: str) -> int:
        """
        Ingest one document.

        Args:
            document_id: Caller-chosen identifier, unique per logical document
            full_text: Extracted plain text

        Returns:
            int: Number of chunks stored

        Raises:
            ValidationError: When document_id or text is empty
            EmbeddingServiceError: When any span fails to embed
            StorageError: When any span fails to save
        """
        if not document_id:
            raise ValidationError("document_id is required", field="document_id")
        if not full_text or not full_text.strip():
            raise ValidationError("Document text is empty", field="text")

        start = time.perf_counter()
        spans = self.plan_chunks(full_text)

        logger.info(
            "Ingesting document",
            extra={"document_id": document_id, "chunk_count": len(spans)},
        )

        try:
            async with asyncio.TaskGroup() as group:
                for index, span in enumerate(spans):
                    group.create_task(self._embed_and_save(document_id, index, span))
        except ExceptionGroup as failures:
            error = _first_failure(failures)
            log_exception_with_context(
                logger,
                "Document ingestion failed; saved chunks are left in place",
                error,
                document_id=document_id,
                chunk_count=len(spans),
                failed_spans=len(failures.exceptions),
            )
            raise error

        logger.info(
            "Document ingested",
            extra={
                "document_id": document_id,
                "chunk_count": len(spans),
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return len(spans)

    async def replace(self, document_id: str, full_text: str) -> int:
        """
        Replace a document's content: delete every chunk, then ingest again.

        Args:
            document_id: Document to replace (may not exist yet)
            full_text: New plain text

        Returns:
            int: Number of chunks stored for the new content
        """
        if not full_text or not full_text.strip():
            raise ValidationError("Document text is empty", field="text")

        deleted = await self._vector_store.delete_document(document_id)
        logger.info(
            "Replacing document",
            extra={"document_id": document_id, "deleted": deleted},
        )
        return await self.ingest(document_id, full_text)

    async def _embed_and_save(self, document_id: str, chunk_index: int, text: str) -> int:
        embedding = await self._embedder.embed(text)
        return await self._vector_store.save(document_id, chunk_index, text, embedding)


def _first_failure(failures: ExceptionGroup) -> Exception:
    """Pick the error to surface from a failed task group, preferring application errors."""
    leaves = list(_leaves(failures))
    for error in leaves:
        if isinstance(error, KnowledgeBaseError):
            return error
    return leaves[0]


def _leaves(group: ExceptionGroup):
    for error in group.exceptions:
        if isinstance(error, ExceptionGroup):
            yield from _leaves(error)
        else:
            yield error
