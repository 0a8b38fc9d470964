"""
Vector store configuration settings.

Selects the vector store backend and fixes the embedding model and its
dimension. The distance metric is always cosine; it is not configurable
because mixing metrics across writes and queries corrupts ranking.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from kbcopilot.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (in-memory for dev, pgvector for prod)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="pgvector",
        description="Vector store type: 'memory' for local dev, 'pgvector' for production",
    )

    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="OpenAI embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1536,
        description="Embedding vector dimension; must match the vector column",
    )
    embed_timeout: float = Field(
        default=30.0,
        description="Deadline in seconds for a single embedding call",
    )

    default_limit: int = Field(default=5, description="Default number of search results")
    max_limit: int = Field(default=20, description="Upper bound on requested search results")
