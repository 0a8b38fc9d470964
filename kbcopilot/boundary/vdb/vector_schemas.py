"""
Vector database schemas.

Pydantic models for vector store results and listing pages.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from pydantic import BaseModel, Field


class VectorSearchResult(BaseModel):
    """Single result from a nearest-neighbor query."""

    id: int = Field(description="Chunk surrogate key")
    document_id: str = Field(description="Document the chunk belongs to")
    chunk_index: int = Field(description="Position of the chunk within its document")
    text: str = Field(description="Chunk text content")
    embedding: list[float] = Field(description="Stored embedding vector")
    distance: float = Field(description="Cosine distance to the query (0 = identical)")

    def to_tool_payload(self) -> dict:
        """Serializable view handed to the chat model (vector omitted)."""
        return {
            "id": self.id,
            "document_id": self.document_id,
            "chunk_index": self.chunk_index,
            "text": self.text,
            "distance": round(self.distance, 6),
        }


class StoredChunk(BaseModel):
    """Chunk row as returned by listing operations."""

    id: int
    chunk_index: int
    text: str


class ChunkPage(BaseModel):
    """One page of a document's chunks, ordered by chunk_index."""

    document_id: str
    total: int
    chunks: list[StoredChunk]


class DocumentSummary(BaseModel):
    """Per-document summary: chunk count and the first chunk's text."""

    document_id: str
    chunk_count: int
    text: str | None = None


class DocumentPage(BaseModel):
    """One page of document summaries."""

    total: int
    documents: list[DocumentSummary]
