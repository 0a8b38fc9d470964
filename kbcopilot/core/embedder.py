"""
OpenAI embedding generator.

Turns text into fixed-dimension dense vectors through a LangChain
Embeddings client. Every call is bounded by a deadline; failures and
timeouts surface as EmbeddingServiceError and are never retried here.

Dependencies: langchain_openai, langchain_core
System role: Embedding generation adapter (I/O boundary)
"""

import asyncio
import logging

from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings
from pydantic import SecretStr

from kbcopilot.core.exceptions import EmbeddingServiceError

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embedding adapter with deadline and dimension checks."""

    def __init__(
        self,
        model: str = "text-embedding-ada-002",
        dimension: int = 1536,
        timeout: float = 30.0,
        api_key: SecretStr | None = None,
        embeddings: Embeddings | None = None,
    ) -> None:
        """
        Initialize embedder.

        Args:
            model: OpenAI embedding model ID
            dimension: Expected vector length (must match the vector column)
            timeout: Default deadline in seconds for one call
            api_key: OpenAI API key (falls back to OPENAI_API_KEY when None)
            embeddings: Pre-built Embeddings client, used instead of OpenAIEmbeddings

        Raises:
            ValueError: When dimension or timeout is not positive
        """
        if dimension < 1:
            raise ValueError("dimension must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.model = model
        self.dimension = dimension
        self.timeout = timeout

        if embeddings is None:
            embeddings = OpenAIEmbeddings(model=model, api_key=api_key, max_retries=0)
        self._embeddings = embeddings

    async def embed(self, text: str, timeout: float | None = None) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Text within the model's token limit
            timeout: Per-call deadline override in seconds

        Returns:
            list[float]: Embedding vector of length ``dimension``

        Raises:
            EmbeddingServiceError: When the call fails, times out, or returns a wrong-sized vector
        """
        vector = await self._call(self._embeddings.aembed_query(text), timeout, input_count=1)
        self._check_dimension(vector)
        return list(vector)

    async def embed_batch(
        self,
        texts: list[str],
        timeout: float | None = None,
    ) -> list[list[float]]:
        """
        Embed several texts in one request.

        Args:
            texts: Texts to embed
            timeout: Per-call deadline override in seconds

        Returns:
            list[list[float]]: Vectors in input order

        Raises:
            EmbeddingServiceError: When the call fails, times out, or returns wrong-sized vectors
        """
        if not texts:
            return []

        vectors = await self._call(
            self._embeddings.aembed_documents(texts),
            timeout,
            input_count=len(texts),
        )
        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                "Embedding service returned a different number of vectors",
                details={"expected": len(texts), "received": len(vectors)},
            )
        for vector in vectors:
            self._check_dimension(vector)
        return [list(vector) for vector in vectors]

    async def _call(self, awaitable, timeout: float | None, input_count: int):
        deadline = timeout if timeout is not None else self.timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=deadline)
        except asyncio.TimeoutError as e:
            logger.warning(
                "Embedding call timed out",
                extra={"model": self.model, "timeout": deadline, "input_count": input_count},
            )
            raise EmbeddingServiceError(
                f"Embedding call timed out after {deadline}s",
                details={"model": self.model},
            ) from e
        except Exception as e:
            logger.warning(
                "Embedding call failed",
                extra={"model": self.model, "error_type": type(e).__name__, "error_msg": str(e)},
            )
            raise EmbeddingServiceError(
                f"Embedding call failed: {e}",
                details={"model": self.model},
            ) from e

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimension:
            raise EmbeddingServiceError(
                "Embedding dimension mismatch",
                details={"expected": self.dimension, "received": len(vector)},
            )
