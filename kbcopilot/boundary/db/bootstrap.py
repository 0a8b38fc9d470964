"""
Database schema bootstrap.

Ensures the pgvector extension and the chunk table exist. Awaited during
application startup; any failure aborts startup because every chunk
operation presupposes both.

Dependencies: sqlalchemy, kbcopilot.boundary.db
System role: Database schema initialization

Usage:
    python -m kbcopilot.boundary.db.bootstrap
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from kbcopilot.boundary.db.base import Base
from kbcopilot.boundary.db.connection import dispose_async_engine, get_async_engine
from kbcopilot.core.exceptions import StorageError

# Import all models to register them with Base.metadata
from kbcopilot.boundary.db.models.chunk_model import ChunkModel  # noqa: F401

logger = logging.getLogger(__name__)


async def ensure_schema(engine: AsyncEngine | None = None) -> None:
    """
    Create the vector extension and all registered tables if missing.

    Idempotent: uses IF NOT EXISTS semantics, so safe to run on every start.

    Args:
        engine: Engine to use (defaults to the shared engine)

    Raises:
        StorageError: When the extension or the table cannot be created
    """
    engine = engine or get_async_engine()
    try:
        async with engine.begin() as conn:
            logger.info("Ensuring pgvector extension")
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            logger.info("Ensuring chunk table")
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "Schema bootstrap failed",
            extra={"error_type": type(e).__name__, "error_msg": str(e)},
        )
        raise StorageError(f"Schema bootstrap failed: {e}", operation="bootstrap") from e
    logger.info("Database schema ready")


async def _main() -> None:
    try:
        await ensure_schema()
    finally:
        await dispose_async_engine()


if __name__ == "__main__":
    asyncio.run(_main())
