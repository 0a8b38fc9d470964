"""
Vector store interface.

Every implementation ranks by cosine distance, breaks ties by ascending
chunk id, and treats (document_id, chunk_index) as the row address.

Dependencies: kbcopilot.boundary.vdb.vector_schemas
System role: Contract shared by the pgvector and in-memory stores
"""

from abc import ABC, abstractmethod

from kbcopilot.boundary.vdb.vector_schemas import ChunkPage, DocumentPage, VectorSearchResult
from kbcopilot.core.exceptions import ValidationError


class VectorStore(ABC):
    """Abstract chunk store with nearest-neighbor search."""

    @abstractmethod
    async def save(
        self,
        document_id: str,
        chunk_index: int,
        text: str,
        embedding: list[float],
    ) -> int:
        """Persist one chunk and return its new id."""

    @abstractmethod
    async def query(self, embedding: list[float], limit: int = 5) -> list[VectorSearchResult]:
        """Return at most ``limit`` chunks, nearest first."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> int:
        """Delete all chunks of a document and return how many were removed."""

    @abstractmethod
    async def list_chunks(self, document_id: str, page: int = 1, page_size: int = 10) -> ChunkPage:
        """Return one page of a document's chunks in index order."""

    @abstractmethod
    async def list_documents(self, page: int = 1, page_size: int = 10) -> DocumentPage:
        """Return one page of document summaries."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise StorageError if the backing store is unreachable."""

    async def close(self) -> None:
        """Release backing resources."""

    @staticmethod
    def _validate_limit(limit: int) -> None:
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")

    @staticmethod
    def _validate_page(page: int, page_size: int) -> int:
        """Validate pagination and return the row offset."""
        if page < 1:
            raise ValidationError("page must be at least 1", field="page")
        if page_size < 1:
            raise ValidationError("page_size must be at least 1", field="page_size")
        return (page - 1) * page_size
