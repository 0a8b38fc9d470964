"""
Chunk CRUD operations.

Row-level access to the documentchunk table: insert, nearest-neighbor
ranking by cosine distance, per-document deletion and paginated listing.

Dependencies: sqlalchemy, pgvector, kbcopilot.boundary.db
System role: Chunk table data access
"""

from typing import Sequence

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from kbcopilot.boundary.db.CRUD.base_crud import BaseCRUD
from kbcopilot.boundary.db.models.chunk_model import ChunkModel


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        super().__init__(ChunkModel)

    async def nearest(
        self,
        session: AsyncSession,
        embedding: list[float],
        limit: int,
    ) -> list[tuple[ChunkModel, float]]:
        """
        Rank chunks by cosine distance to an embedding.

        Uses the pgvector ``<=>`` operator; ties are broken by ascending id.

        Args:
            session: Async database session
            embedding: Query vector
            limit: Maximum rows to return

        Returns:
            list[tuple[ChunkModel, float]]: Chunks with their distance, nearest first
        """
        distance = ChunkModel.embedding.cosine_distance(embedding).label("distance")
        stmt = (
            select(ChunkModel, distance)
            .order_by(distance, ChunkModel.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(row[0], float(row[1])) for row in result.all()]

    async def delete_by_document_id(self, session: AsyncSession, document_id: str) -> int:
        """
        Delete every chunk of a document.

        Args:
            session: Async database session
            document_id: Document identifier

        Returns:
            int: Number of rows deleted (0 when the document does not exist)
        """
        stmt = delete(ChunkModel).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def get_by_document_id(
        self,
        session: AsyncSession,
        document_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ChunkModel]:
        """
        Get a document's chunks in chunk_index order.

        Args:
            session: Async database session
            document_id: Document identifier
            limit: Maximum rows (None for all)
            offset: Rows to skip

        Returns:
            Sequence[ChunkModel]: Chunks ordered by chunk_index
        """
        stmt = (
            select(ChunkModel)
            .where(ChunkModel.document_id == document_id)
            .order_by(ChunkModel.chunk_index)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_document_id(self, session: AsyncSession, document_id: str) -> int:
        """Count the chunks of one document."""
        stmt = select(func.count()).select_from(ChunkModel).where(
            ChunkModel.document_id == document_id
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def count_documents(self, session: AsyncSession) -> int:
        """Count distinct document ids."""
        stmt = select(func.count(func.distinct(ChunkModel.document_id)))
        result = await session.execute(stmt)
        return result.scalar_one()

    async def summarize_documents(
        self,
        session: AsyncSession,
        limit: int,
        offset: int = 0,
    ) -> list[tuple[str, int, str | None]]:
        """
        Summarize documents in first-insertion order.

        Args:
            session: Async database session
            limit: Maximum documents to return
            offset: Documents to skip

        Returns:
            list[tuple[str, int, str | None]]: (document_id, chunk_count, text of chunk 0)
        """
        summary = (
            select(
                ChunkModel.document_id.label("document_id"),
                func.count().label("chunk_count"),
                func.min(ChunkModel.id).label("first_id"),
            )
            .group_by(ChunkModel.document_id)
            .subquery()
        )
        first_chunk = aliased(ChunkModel)
        stmt = (
            select(summary.c.document_id, summary.c.chunk_count, first_chunk.text)
            .outerjoin(
                first_chunk,
                and_(
                    first_chunk.document_id == summary.c.document_id,
                    first_chunk.chunk_index == 0,
                ),
            )
            .order_by(summary.c.first_id)
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(row[0], int(row[1]), row[2]) for row in result.all()]


chunk_crud = ChunkCRUD()
