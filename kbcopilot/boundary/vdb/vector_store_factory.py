"""
Vector store factory for selecting between in-memory (dev) and pgvector (prod).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: kbcopilot.boundary.vdb, kbcopilot.configs
System role: Vector store instantiation and selection
"""

import logging

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.boundary.vdb.memory_store import InMemoryVectorStore
from kbcopilot.configs import Settings, get_settings

logger = logging.getLogger(__name__)

STORE_TYPES = ("memory", "pgvector")


def uses_database(settings: Settings | None = None) -> bool:
    """Whether the configured store needs the relational schema."""
    settings = settings or get_settings()
    return settings.vector_store.store_type.lower() == "pgvector"


def get_vector_store(settings: Settings | None = None) -> VectorStore:
    """
    Factory function to get vector store based on environment configuration.

    Args:
        settings: Settings to use (defaults to the cached application settings)

    Returns:
        VectorStore: InMemoryVectorStore or PgVectorStore

    Raises:
        ValueError: If the store type is invalid
    """
    settings = settings or get_settings()
    store_type = settings.vector_store.store_type.lower()

    if store_type == "memory":
        logger.info(f"{__name__}:get_vector_store - Creating in-memory vector store (local dev mode)")
        return InMemoryVectorStore(dimension=settings.vector_store.embedding_dimension)

    if store_type == "pgvector":
        logger.info(f"{__name__}:get_vector_store - Creating pgvector store (production mode)")
        # Imported lazily so the memory store works without a database driver configured
        from kbcopilot.boundary.db.connection import get_async_session_factory
        from kbcopilot.boundary.vdb.pgvector_store import PgVectorStore

        return PgVectorStore(session_factory=get_async_session_factory())

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. "
        f"Must be one of {', '.join(STORE_TYPES)}."
    )
