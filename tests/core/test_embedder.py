"""Tests for the embedding adapter.

Dependencies: pytest, unittest.mock, langchain_core
System role: Embedding deadline, dimension and error mapping verification
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from kbcopilot.core.embedder import OpenAIEmbedder
from kbcopilot.core.exceptions import EmbeddingServiceError, UpstreamServiceError


def _mock_embeddings(**methods) -> MagicMock:
    embeddings = MagicMock()
    for name, value in methods.items():
        setattr(embeddings, name, value)
    return embeddings


class TestOpenAIEmbedderInit:
    """Test constructor validation."""

    def test_rejects_non_positive_dimension(self) -> None:
        with pytest.raises(ValueError):
            OpenAIEmbedder(dimension=0, embeddings=DeterministicFakeEmbedding(size=4))

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            OpenAIEmbedder(dimension=4, timeout=0, embeddings=DeterministicFakeEmbedding(size=4))


class TestOpenAIEmbedderEmbed:
    """Test OpenAIEmbedder.embed() and embed_batch()."""

    @pytest.mark.asyncio
    async def test_embed_returns_vector_of_dimension(self, embedder: OpenAIEmbedder) -> None:
        vector = await embedder.embed("How do I rotate API keys?")

        assert isinstance(vector, list)
        assert len(vector) == embedder.dimension

    @pytest.mark.asyncio
    async def test_embed_is_deterministic(self, embedder: OpenAIEmbedder) -> None:
        """Identical text yields identical vectors with the fake backend."""
        assert await embedder.embed("same text") == await embedder.embed("same text")

    @pytest.mark.asyncio
    async def test_embed_batch_preserves_order(self, embedder: OpenAIEmbedder) -> None:
        texts = ["alpha", "beta", "gamma"]
        vectors = await embedder.embed_batch(texts)

        assert len(vectors) == 3
        assert vectors[1] == await embedder.embed("beta")

    @pytest.mark.asyncio
    async def test_embed_batch_empty_makes_no_call(self) -> None:
        backend = _mock_embeddings(aembed_documents=AsyncMock())
        embedder = OpenAIEmbedder(dimension=4, embeddings=backend)

        assert await embedder.embed_batch([]) == []
        backend.aembed_documents.assert_not_called()

    @pytest.mark.asyncio
    async def test_dimension_mismatch_raises(self) -> None:
        backend = _mock_embeddings(aembed_query=AsyncMock(return_value=[0.1, 0.2]))
        embedder = OpenAIEmbedder(dimension=4, embeddings=backend)

        with pytest.raises(EmbeddingServiceError) as exc_info:
            await embedder.embed("text")
        assert exc_info.value.details["expected"] == 4

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_upstream_error(self) -> None:
        backend = _mock_embeddings(aembed_query=AsyncMock(side_effect=RuntimeError("429 rate limited")))
        embedder = OpenAIEmbedder(dimension=4, embeddings=backend)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await embedder.embed("text")
        assert exc_info.value.details["service"] == "embedding"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_embedding_error(self) -> None:
        async def slow(_text: str) -> list[float]:
            await asyncio.sleep(1)
            return [0.0] * 4

        backend = _mock_embeddings(aembed_query=slow)
        embedder = OpenAIEmbedder(dimension=4, timeout=0.01, embeddings=backend)

        with pytest.raises(EmbeddingServiceError, match="timed out"):
            await embedder.embed("text")

    @pytest.mark.asyncio
    async def test_per_call_timeout_overrides_default(self) -> None:
        async def slow(_text: str) -> list[float]:
            await asyncio.sleep(0.05)
            return [0.0] * 4

        backend = _mock_embeddings(aembed_query=slow)
        embedder = OpenAIEmbedder(dimension=4, timeout=0.001, embeddings=backend)

        assert await embedder.embed("text", timeout=1.0) == [0.0] * 4

    @pytest.mark.asyncio
    async def test_batch_count_mismatch_raises(self) -> None:
        backend = _mock_embeddings(aembed_documents=AsyncMock(return_value=[[0.0] * 4]))
        embedder = OpenAIEmbedder(dimension=4, embeddings=backend)

        with pytest.raises(EmbeddingServiceError):
            await embedder.embed_batch(["a", "b"])
