"""
Ingestion pipeline configuration settings.

Token budgets are measured with the embedding model's tokenizer.

Dependencies: pydantic, pydantic_settings
System role: Chunking configuration for document ingestion
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from kbcopilot.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Settings for the chunk-embed-save pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    max_tokens: int = Field(
        default=1000,
        description="Maximum tokens per chunk; shorter documents are stored whole",
    )
    overlap_tokens: int = Field(
        default=200,
        description="Tokens shared between consecutive chunks",
    )
