"""
PostgreSQL + pgvector chunk store.

Every operation opens its own AsyncSession and commits it, so concurrent
ingestion tasks never share a transaction and every query reads the
database directly (no caching layer).

Dependencies: sqlalchemy, pgvector, kbcopilot.boundary.db
System role: Production vector store
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from kbcopilot.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.boundary.vdb.vector_schemas import (
    ChunkPage,
    DocumentPage,
    DocumentSummary,
    StoredChunk,
    VectorSearchResult,
)
from kbcopilot.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class PgVectorStore(VectorStore):
    """Chunk store backed by the documentchunk table."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        crud: ChunkCRUD = chunk_crud,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Factory producing AsyncSessions bound to the shared engine
            crud: Chunk CRUD helper
        """
        self._session_factory = session_factory
        self._crud = crud

    async def save(
        self,
        document_id: str,
        chunk_index: int,
        text: str,
        embedding: list[float],
    ) -> int:
        """
        Insert one chunk row.

        Args:
            document_id: Document identifier
            chunk_index: Zero-based position within the document
            text: Chunk text
            embedding: Chunk vector

        Returns:
            int: New row id

        Raises:
            StorageError: On connection failure or a duplicate (document_id, chunk_index)
        """
        logger.debug(
            "Saving chunk",
            extra={"document_id": document_id, "chunk_index": chunk_index},
        )
        try:
            async with self._session_factory() as session:
                row = await self._crud.create(
                    session,
                    document_id=document_id,
                    chunk_index=chunk_index,
                    text=text,
                    embedding=embedding,
                )
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            raise self._storage_error("save", e, document_id=document_id, chunk_index=chunk_index) from e

    async def query(self, embedding: list[float], limit: int = 5) -> list[VectorSearchResult]:
        """
        Rank stored chunks by cosine distance.

        Args:
            embedding: Query vector
            limit: Maximum results

        Returns:
            list[VectorSearchResult]: Nearest first, ties by ascending id

        Raises:
            ValidationError: When limit < 1
            StorageError: On database failure
        """
        self._validate_limit(limit)
        try:
            async with self._session_factory() as session:
                rows = await self._crud.nearest(session, embedding, limit)
        except SQLAlchemyError as e:
            raise self._storage_error("query", e, limit=limit) from e

        return [
            VectorSearchResult(
                id=row.id,
                document_id=row.document_id,
                chunk_index=row.chunk_index,
                text=row.text,
                embedding=[float(value) for value in row.embedding],
                distance=distance,
            )
            for row, distance in rows
        ]

    async def delete_document(self, document_id: str) -> int:
        """
        Delete every chunk of a document.

        Args:
            document_id: Document identifier

        Returns:
            int: Rows deleted (0 for an unknown document)

        Raises:
            StorageError: On database failure
        """
        try:
            async with self._session_factory() as session:
                deleted = await self._crud.delete_by_document_id(session, document_id)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("delete", e, document_id=document_id) from e

        logger.info(
            "Deleted document chunks",
            extra={"document_id": document_id, "deleted": deleted},
        )
        return deleted

    async def list_chunks(self, document_id: str, page: int = 1, page_size: int = 10) -> ChunkPage:
        """Return one page of a document's chunks in index order."""
        offset = self._validate_page(page, page_size)
        try:
            async with self._session_factory() as session:
                total = await self._crud.count_by_document_id(session, document_id)
                rows = await self._crud.get_by_document_id(
                    session, document_id, limit=page_size, offset=offset
                )
        except SQLAlchemyError as e:
            raise self._storage_error("list", e, document_id=document_id) from e

        return ChunkPage(
            document_id=document_id,
            total=total,
            chunks=[StoredChunk(id=row.id, chunk_index=row.chunk_index, text=row.text) for row in rows],
        )

    async def list_documents(self, page: int = 1, page_size: int = 10) -> DocumentPage:
        """Return one page of document summaries in first-insertion order."""
        offset = self._validate_page(page, page_size)
        try:
            async with self._session_factory() as session:
                total = await self._crud.count_documents(session)
                rows = await self._crud.summarize_documents(session, limit=page_size, offset=offset)
        except SQLAlchemyError as e:
            raise self._storage_error("list", e) from e

        return DocumentPage(
            total=total,
            documents=[
                DocumentSummary(document_id=document_id, chunk_count=count, text=first_text)
                for document_id, count, first_text in rows
            ],
        )

    async def ping(self) -> None:
        """Run a trivial statement against the database."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            raise self._storage_error("ping", e) from e

    @staticmethod
    def _storage_error(operation: str, exc: Exception, **context) -> StorageError:
        logger.error(
            f"Vector store {operation} failed",
            extra={"operation": operation, "error_type": type(exc).__name__, "error_msg": str(exc), **context},
        )
        return StorageError(f"Vector store {operation} failed: {exc}", operation=operation, details=context)
