"""
Chat session store configuration settings.

Dependencies: pydantic, pydantic_settings
System role: In-memory session eviction policy
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from kbcopilot.configs.base import BaseSettings


class SessionSettings(BaseSettings):
    """Eviction policy for in-memory chat sessions."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SESSION_",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: float = Field(
        default=3600.0,
        description="Idle time after which a session is evicted",
    )
    max_sessions: int = Field(
        default=1000,
        description="Maximum sessions kept; least recently used are evicted first",
    )
