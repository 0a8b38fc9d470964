"""
Model-specific token counting.

Counts tokens with the embedding model's own tiktoken encoding, so a text
that passes the budget check is guaranteed not to be truncated by the
embedding call.

Dependencies: tiktoken
System role: Leaf utility for ingestion budgeting and chunk sizing
"""

from functools import lru_cache

import tiktoken


class TokenCounter:
    """Count tokens for a given OpenAI model's encoding."""

    def __init__(self, model_name: str = "text-embedding-ada-002") -> None:
        """
        Initialize counter with the model's encoding.

        Args:
            model_name: OpenAI model name used to pick the encoding

        Raises:
            KeyError: When tiktoken has no encoding for the model
        """
        self.model_name = model_name
        self._encoding = tiktoken.encoding_for_model(model_name)

    @property
    def encoding_name(self) -> str:
        """Name of the underlying tiktoken encoding (e.g. cl100k_base)."""
        return self._encoding.name

    def count(self, text: str) -> int:
        """
        Count tokens in a text span.

        Special-token markers such as ``<|endoftext|>`` appearing in user text
        are encoded as ordinary text.

        Args:
            text: Text to count

        Returns:
            int: Number of model tokens
        """
        if not text:
            return 0
        return len(self._encoding.encode(text, disallowed_special=()))


@lru_cache
def get_token_counter(model_name: str = "text-embedding-ada-002") -> TokenCounter:
    """Return a cached TokenCounter for the model."""
    return TokenCounter(model_name)
