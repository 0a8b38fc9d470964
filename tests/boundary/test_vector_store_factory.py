"""Tests for vector store selection and schema bootstrap.

Dependencies: pytest, unittest.mock, sqlalchemy
System role: Store factory and startup bootstrap verification
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from kbcopilot.boundary.db.bootstrap import ensure_schema
from kbcopilot.boundary.vdb.memory_store import InMemoryVectorStore
from kbcopilot.boundary.vdb.pgvector_store import PgVectorStore
from kbcopilot.boundary.vdb.vector_store_factory import get_vector_store, uses_database
from kbcopilot.configs import Settings
from kbcopilot.configs.vector_store import VectorStoreSettings
from kbcopilot.core.exceptions import StorageError


def _settings(store_type: str) -> Settings:
    return Settings(vector_store=VectorStoreSettings(store_type=store_type))


class TestGetVectorStore:
    def test_memory_store_selected(self) -> None:
        store = get_vector_store(_settings("memory"))
        assert isinstance(store, InMemoryVectorStore)
        assert not uses_database(_settings("memory"))

    def test_store_type_is_case_insensitive(self) -> None:
        assert isinstance(get_vector_store(_settings("MEMORY")), InMemoryVectorStore)

    def test_pgvector_store_selected(self) -> None:
        factory = MagicMock()
        with patch("kbcopilot.boundary.db.connection.get_async_session_factory", return_value=factory):
            store = get_vector_store(_settings("pgvector"))

        assert isinstance(store, PgVectorStore)
        assert uses_database(_settings("pgvector"))

    def test_unknown_store_type_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid VECTOR_STORE_STORE_TYPE"):
            get_vector_store(_settings("faiss"))


class TestEnsureSchema:
    @pytest.mark.asyncio
    async def test_creates_extension_and_tables(self) -> None:
        conn = AsyncMock()
        engine = MagicMock()
        engine.begin.return_value.__aenter__.return_value = conn

        await ensure_schema(engine)

        statement = conn.execute.await_args.args[0]
        assert "CREATE EXTENSION IF NOT EXISTS vector" in str(statement)
        conn.run_sync.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_database_fails_loudly(self) -> None:
        engine = MagicMock()
        engine.begin.return_value.__aenter__.side_effect = OperationalError(
            "connect", {}, ConnectionRefusedError("refused")
        )

        with pytest.raises(StorageError) as exc_info:
            await ensure_schema(engine)
        assert exc_info.value.details["operation"] == "bootstrap"

    @pytest.mark.asyncio
    async def test_database_without_vector_support_fails(self, test_engine) -> None:
        """SQLite has no CREATE EXTENSION, standing in for a server without pgvector."""
        with pytest.raises(StorageError):
            await ensure_schema(test_engine)
