"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite async database, deterministic embeddings, in-memory store,
scripted streaming chat model, wired ingestion pipeline
Dependencies: pytest, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.messages import AIMessageChunk, BaseMessage
from langchain_core.messages.tool import tool_call_chunk

TEST_DIMENSION = 1536


class ScriptedChatModel:
    """
    Chat model double that replays one scripted stream per call.

    Each script is a list of AIMessageChunk items; an Exception item is
    raised at that point of the stream. Every call records the turns it
    received and whether tools were bound.
    """

    def __init__(self, scripts: list[list]) -> None:
        self.scripts = list(scripts)
        self.calls: list[dict] = []
        self.bound_tools: list | None = None
        self.closed_streams = 0

    def bind_tools(self, tools: list) -> "_BoundScriptedModel":
        self.bound_tools = tools
        return _BoundScriptedModel(self, tools)

    def astream(self, turns: list[BaseMessage]) -> AsyncIterator[AIMessageChunk]:
        return self._replay(turns, tools=None)

    async def _replay(self, turns: list[BaseMessage], tools) -> AsyncIterator[AIMessageChunk]:
        self.calls.append({"turns": list(turns), "tools": tools})
        script = self.scripts.pop(0)
        try:
            for item in script:
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            self.closed_streams += 1


class _BoundScriptedModel:
    def __init__(self, model: ScriptedChatModel, tools: list) -> None:
        self._model = model
        self._tools = tools

    def astream(self, turns: list[BaseMessage]) -> AsyncIterator[AIMessageChunk]:
        return self._model._replay(turns, tools=self._tools)


def _text_chunks(*parts: str) -> list[AIMessageChunk]:
    """Content-only stream deltas."""
    return [AIMessageChunk(content=part) for part in parts]


def _tool_call_chunks(
    arguments: list[str],
    name: str = "search_knowledge_base",
    call_id: str | None = "call_1",
) -> list[AIMessageChunk]:
    """Stream deltas carrying one tool call: name and id first, then argument fragments."""
    chunks = [
        AIMessageChunk(
            content="",
            tool_call_chunks=[tool_call_chunk(name=name, args="", id=call_id, index=0)],
        )
    ]
    for fragment in arguments:
        chunks.append(
            AIMessageChunk(
                content="",
                tool_call_chunks=[tool_call_chunk(name=None, args=fragment, id=None, index=0)],
            )
        )
    return chunks


@pytest.fixture
def text_chunks():
    """Builder of content-only stream deltas."""
    return _text_chunks


@pytest.fixture
def tool_call_chunks():
    """Builder of stream deltas carrying one tool call."""
    return _tool_call_chunks


@pytest.fixture
def scripted_chat_model():
    """Factory building a ScriptedChatModel from per-call scripts."""
    return ScriptedChatModel


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Deterministic embeddings: identical text maps to identical vectors."""
    return DeterministicFakeEmbedding(size=TEST_DIMENSION)


@pytest.fixture
def embedder(fake_embeddings):
    """OpenAIEmbedder backed by deterministic fake embeddings."""
    from kbcopilot.core.embedder import OpenAIEmbedder

    return OpenAIEmbedder(dimension=TEST_DIMENSION, timeout=5.0, embeddings=fake_embeddings)


@pytest.fixture
def memory_store():
    """Empty in-memory vector store."""
    from kbcopilot.boundary.vdb.memory_store import InMemoryVectorStore

    return InMemoryVectorStore(dimension=TEST_DIMENSION)


@pytest.fixture
def token_counter():
    """Token counter for the default embedding model."""
    from kbcopilot.core.tokenizer import get_token_counter

    return get_token_counter("text-embedding-ada-002")


@pytest.fixture
def pipeline(token_counter, embedder, memory_store):
    """Ingestion pipeline over the in-memory store with a small chunk budget."""
    from kbcopilot.core.chunker import TextChunker
    from kbcopilot.core.ingestion_pipeline import IngestionPipeline

    return IngestionPipeline(
        token_counter=token_counter,
        chunker=TextChunker(token_counter),
        embedder=embedder,
        vector_store=memory_store,
        max_tokens=50,
        overlap_tokens=10,
    )


@pytest.fixture
def session_store():
    """Session store with a short system prompt and no eviction."""
    from kbcopilot.core.conversation import InMemorySessionStore, NoEvictionPolicy

    return InMemorySessionStore(system_prompt="You are a test copilot.", eviction_policy=NoEvictionPolicy())


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with the schema created.

    Yields:
        AsyncEngine: Engine shared by every session through StaticPool
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from kbcopilot.boundary.db.base import Base
    from kbcopilot.boundary.db.models.chunk_model import ChunkModel  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """Session factory bound to the SQLite test engine."""
    from kbcopilot.boundary.db.connection import get_async_session_factory

    return get_async_session_factory(test_engine)


@pytest.fixture
async def test_async_db(test_session_factory):
    """
    Create a session on the in-memory SQLite database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with test_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_document_service():
    """
    Create mock DocumentService for testing.

    Returns:
        AsyncMock: Mocked DocumentService with async methods
    """
    service = AsyncMock()
    service.ingest_text = AsyncMock(return_value=("doc-1", 2))
    service.ingest_files = AsyncMock(return_value=[])
    service.replace_document = AsyncMock(return_value=3)
    service.delete_document = AsyncMock(return_value=4)
    return service
