"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from kbcopilot.configs.base import BaseSettings
from kbcopilot.configs.database import DatabaseSettings
from kbcopilot.configs.ingestion import IngestionSettings
from kbcopilot.configs.llm import LLMSettings
from kbcopilot.configs.sessions import SessionSettings
from kbcopilot.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    sessions: SessionSettings = Field(default_factory=SessionSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from kbcopilot.configs import get_settings
        settings = get_settings()
    """
    return Settings()
