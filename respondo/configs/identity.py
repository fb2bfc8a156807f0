"""
Identity provider configuration.

Dependencies: pydantic_settings
System role: Auth collaborator endpoint configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from respondo.configs.base import BaseSettings


class IdentitySettings(BaseSettings):
    """Settings for the hosted identity provider."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IDENTITY_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:54321",
        description="Identity provider URL (auth/v1 is appended)",
    )
    api_key: str = Field(default="", description="Project API key sent as the apikey header")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
