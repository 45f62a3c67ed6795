"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from paperdesk.configs.base import BaseSettings
from paperdesk.configs.extraction import ExtractionSettings
from paperdesk.configs.llm import LLMSettings
from paperdesk.configs.object_store import ObjectStoreSettings
from paperdesk.configs.rag import RAGSettings
from paperdesk.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    object_store: ObjectStoreSettings = Field(default_factory=ObjectStoreSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    rag: RAGSettings = Field(default_factory=RAGSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from paperdesk.configs import get_settings
        settings = get_settings()
    """
    return Settings()
