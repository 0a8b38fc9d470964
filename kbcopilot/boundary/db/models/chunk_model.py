"""
Chunk ORM model.

One row per stored chunk: verbatim text, its embedding, and its position
within the originating document. Rows are written once and never updated;
a document is replaced by deleting all of its rows and re-ingesting.

Dependencies: sqlalchemy, pgvector, kbcopilot.configs
System role: Persisted chunk table (documentchunk)
"""

from pgvector.sqlalchemy import Vector
from sqlalchemy import Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kbcopilot.boundary.db.base import Base
from kbcopilot.configs import get_settings

EMBEDDING_DIMENSION = get_settings().vector_store.embedding_dimension


class ChunkModel(Base):
    """
    Chunk of a document with its embedding.

    Attributes:
        id: Surrogate key, monotonically increasing
        document_id: Opaque identifier grouping chunks of one document
        chunk_index: Zero-based position within the document
        text: Verbatim chunk content
        embedding: Dense vector; dimension fixed at deployment time
    """

    __tablename__ = "documentchunk"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(255), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(Vector(EMBEDDING_DIMENSION), nullable=False)

    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_documentchunk_document_index"),
        Index("ix_documentchunk_document_id", "document_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChunkModel(id={self.id}, document_id={self.document_id!r}, "
            f"chunk_index={self.chunk_index})>"
        )
