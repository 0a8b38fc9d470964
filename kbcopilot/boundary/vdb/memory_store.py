"""
In-memory chunk store for development and tests.

Keeps rows in a dict keyed by id and ranks them with numpy cosine distance,
mirroring the pgvector store's ordering (distance, then id). Contents are
lost on restart.

Dependencies: numpy
System role: Development vector store (local testing only)
"""

import itertools

import numpy as np

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.boundary.vdb.vector_schemas import (
    ChunkPage,
    DocumentPage,
    DocumentSummary,
    StoredChunk,
    VectorSearchResult,
)
from kbcopilot.core.exceptions import StorageError


def cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine distance in [0, 2]; a zero vector is treated as orthogonal."""
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 1.0
    return 1.0 - float(np.dot(a, b)) / norm


class InMemoryVectorStore(VectorStore):
    """Process-local chunk store with exact nearest-neighbor search."""

    def __init__(self, dimension: int | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            dimension: Expected vector length; checked on save when given
        """
        self._dimension = dimension
        self._rows: dict[int, dict] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rows)

    async def save(
        self,
        document_id: str,
        chunk_index: int,
        text: str,
        embedding: list[float],
    ) -> int:
        """Store one chunk; duplicate (document_id, chunk_index) is rejected like the unique constraint."""
        if self._dimension is not None and len(embedding) != self._dimension:
            raise StorageError(
                "Embedding dimension does not match the store",
                operation="save",
                details={"expected": self._dimension, "received": len(embedding)},
            )
        for row in self._rows.values():
            if row["document_id"] == document_id and row["chunk_index"] == chunk_index:
                raise StorageError(
                    "Duplicate chunk for document",
                    operation="save",
                    details={"document_id": document_id, "chunk_index": chunk_index},
                )

        row_id = next(self._ids)
        self._rows[row_id] = {
            "id": row_id,
            "document_id": document_id,
            "chunk_index": chunk_index,
            "text": text,
            "embedding": np.asarray(embedding, dtype=float),
        }
        return row_id

    async def query(self, embedding: list[float], limit: int = 5) -> list[VectorSearchResult]:
        """Exact cosine ranking over all rows."""
        self._validate_limit(limit)
        target = np.asarray(embedding, dtype=float)
        ranked = sorted(
            ((cosine_distance(target, row["embedding"]), row_id) for row_id, row in self._rows.items()),
        )[:limit]
        return [
            VectorSearchResult(
                id=row_id,
                document_id=self._rows[row_id]["document_id"],
                chunk_index=self._rows[row_id]["chunk_index"],
                text=self._rows[row_id]["text"],
                embedding=self._rows[row_id]["embedding"].tolist(),
                distance=distance,
            )
            for distance, row_id in ranked
        ]

    async def delete_document(self, document_id: str) -> int:
        doomed = [row_id for row_id, row in self._rows.items() if row["document_id"] == document_id]
        for row_id in doomed:
            del self._rows[row_id]
        return len(doomed)

    async def list_chunks(self, document_id: str, page: int = 1, page_size: int = 10) -> ChunkPage:
        offset = self._validate_page(page, page_size)
        rows = sorted(
            (row for row in self._rows.values() if row["document_id"] == document_id),
            key=lambda row: row["chunk_index"],
        )
        return ChunkPage(
            document_id=document_id,
            total=len(rows),
            chunks=[
                StoredChunk(id=row["id"], chunk_index=row["chunk_index"], text=row["text"])
                for row in rows[offset:offset + page_size]
            ],
        )

    async def list_documents(self, page: int = 1, page_size: int = 10) -> DocumentPage:
        offset = self._validate_page(page, page_size)
        summaries: dict[str, DocumentSummary] = {}
        # Rows iterate in id order, so dict order is first-insertion order
        for row in self._rows.values():
            summary = summaries.setdefault(
                row["document_id"],
                DocumentSummary(document_id=row["document_id"], chunk_count=0),
            )
            summary.chunk_count += 1
            if row["chunk_index"] == 0:
                summary.text = row["text"]
        documents = list(summaries.values())
        return DocumentPage(total=len(documents), documents=documents[offset:offset + page_size])

    async def ping(self) -> None:
        return None
