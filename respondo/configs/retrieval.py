"""
Retrieval configuration.

Dependencies: pydantic_settings
System role: Similarity search thresholds for context assembly
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from respondo.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Similarity search settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    match_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity score for a chunk to be returned",
    )
    match_count: int = Field(default=5, ge=1, description="Maximum number of chunks returned")
    match_function: str = Field(
        default="match_documents",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Stored procedure computing nearest neighbours",
    )
