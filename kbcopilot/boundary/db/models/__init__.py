"""ORM models."""

from kbcopilot.boundary.db.models.chunk_model import ChunkModel

__all__ = ["ChunkModel"]
