"""
Object storage configuration.

Settings for the raw document bucket, upload limits and signed URL expiry.

Dependencies: pydantic_settings
System role: Document storage bucket configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from respondo.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """Settings for document object storage."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="documents", description="Bucket holding uploaded documents")
    region: str = Field(default="us-east-1", description="Region of the bucket")
    endpoint_url: str | None = Field(
        default=None,
        description="Endpoint of an S3-compatible store (None uses AWS)",
    )
    signed_url_expiry: int = Field(
        default=3600,
        description="Signed URL expiry in seconds (default 1 hour)",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted upload in bytes",
    )
    allowed_extensions: list[str] = Field(
        default=["txt", "doc", "docx", "pdf"],
        description="File extensions accepted for upload",
    )
