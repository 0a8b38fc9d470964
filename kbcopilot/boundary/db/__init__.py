"""
Database boundary layer: ORM model, CRUD operations, connection management.

Exports:
  - Base: Model building block
  - get_async_engine(), get_async_session_factory(), dispose_async_engine()
  - ChunkModel: Persisted chunk table
  - ensure_schema(): Startup schema bootstrap
  - chunk_crud: CRUD singleton

Dependencies: sqlalchemy, pgvector, kbcopilot.configs
System role: Database adapter for chunk storage
"""

from kbcopilot.boundary.db.base import Base
from kbcopilot.boundary.db.bootstrap import ensure_schema
from kbcopilot.boundary.db.connection import (
    dispose_async_engine,
    get_async_engine,
    get_async_session_factory,
)
from kbcopilot.boundary.db.models.chunk_model import ChunkModel
from kbcopilot.boundary.db.CRUD import BaseCRUD, ChunkCRUD, chunk_crud

__all__ = [
    "Base",
    "ensure_schema",
    "dispose_async_engine",
    "get_async_engine",
    "get_async_session_factory",
    "ChunkModel",
    "BaseCRUD",
    "ChunkCRUD",
    "chunk_crud",
]
