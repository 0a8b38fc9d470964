"""
Chat model configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Language model client configuration
"""

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict

from kbcopilot.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """OpenAI chat model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_KEY", "LLM_API_KEY"),
        description="OpenAI API key (shared by chat and embedding clients)",
    )
    chat_model: str = Field(default="gpt-4.1", description="Chat completion model ID")
    temperature: float = Field(default=0.0, description="Sampling temperature")
    request_timeout: float = Field(
        default=60.0,
        description="HTTP timeout in seconds for opening a model request",
    )
    stream_idle_timeout: float = Field(
        default=60.0,
        description="Maximum seconds to wait for the next streamed delta",
    )
