"""
Vector store boundary.

Exports the VectorStore contract, both implementations, result schemas and
the environment-driven factory.
"""

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.boundary.vdb.memory_store import InMemoryVectorStore
from kbcopilot.boundary.vdb.vector_schemas import (
    ChunkPage,
    DocumentPage,
    DocumentSummary,
    StoredChunk,
    VectorSearchResult,
)
from kbcopilot.boundary.vdb.vector_store_factory import get_vector_store, uses_database

__all__ = [
    "VectorStore",
    "InMemoryVectorStore",
    "ChunkPage",
    "DocumentPage",
    "DocumentSummary",
    "StoredChunk",
    "VectorSearchResult",
    "get_vector_store",
    "uses_database",
]
