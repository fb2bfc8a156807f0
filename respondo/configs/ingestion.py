"""
Document ingestion configuration.

Dependencies: pydantic_settings
System role: Chunking and extraction limits for the ingestion pipeline
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from respondo.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Chunking and extraction settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1000, description="Words per chunk window")
    chunk_overlap: int = Field(default=200, description="Words shared by consecutive windows")
    max_extracted_chars: int = Field(
        default=10_000,
        ge=0,
        description="Extracted text is cut to this many characters (0 disables)",
    )
    error_message_max_length: int = Field(
        default=2000,
        description="Longest error message stored on a failed document",
    )
