"""
LLM configuration settings.

Gemini chat and embedding model selection.

Dependencies: pydantic_settings
System role: Model configuration for generation and embeddings
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Chat and embedding model settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Google Gemini chat model used for answers, summaries and comparisons",
    )
    embedding_model: str = Field(
        default="models/text-embedding-004",
        description="Google embedding model ID",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Expected embedding vector dimension (768 for text-embedding-004)",
    )
    google_api_key: str | None = Field(
        default=None,
        description="Google API key; falls back to GOOGLE_API_KEY when unset",
    )
