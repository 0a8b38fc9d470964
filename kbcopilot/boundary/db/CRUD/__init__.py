"""CRUD operation classes and singletons."""

from kbcopilot.boundary.db.CRUD.base_crud import BaseCRUD
from kbcopilot.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud

__all__ = ["BaseCRUD", "ChunkCRUD", "chunk_crud"]
