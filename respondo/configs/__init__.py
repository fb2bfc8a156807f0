"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from respondo.configs.database import DatabaseSettings
from respondo.configs.identity import IdentitySettings
from respondo.configs.ingestion import IngestionSettings
from respondo.configs.llm import LLMSettings
from respondo.configs.retrieval import RetrievalSettings
from respondo.configs.settings import Settings, get_settings
from respondo.configs.storage import StorageSettings

__all__ = [
    "DatabaseSettings",
    "IdentitySettings",
    "IngestionSettings",
    "LLMSettings",
    "RetrievalSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
