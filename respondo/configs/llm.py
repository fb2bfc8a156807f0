"""
Language model provider configuration.

Covers both the embedding endpoint used by ingestion and retrieval and the
chat completions endpoint used for streamed answers.

Dependencies: pydantic_settings
System role: LLM provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from respondo.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """OpenAI-compatible API settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="OPENAI_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(default="", description="Bearer credential for the provider")
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Provider base URL (embeddings and chat/completions are appended)",
    )
    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model identifier",
    )
    embedding_dimension: int = Field(
        default=1536,
        description="Expected embedding vector length",
    )
    chat_model: str = Field(default="gpt-3.5-turbo", description="Chat model identifier")

    connect_timeout: float = Field(default=10.0, description="Connect timeout in seconds")
    request_timeout: float = Field(
        default=60.0,
        description="Read timeout in seconds (between streamed chunks for chat)",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Chat stream retries after the first attempt",
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Retry delay in seconds, multiplied by the attempt number",
    )
