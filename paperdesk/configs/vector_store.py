"""
Vector store configuration settings.

Selects the vector index implementation and names the S3 Vectors index.

Dependencies: pydantic, pydantic_settings
System role: Vector index configuration for retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (FAISS for dev, S3 Vectors for prod)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="faiss",
        description="Vector store type: 'faiss' for local dev, 's3' for production",
    )
    region: str = Field(default="us-east-1", description="AWS region for S3 Vectors")
    vectors_bucket: str = Field(
        default="paperdesk-dev-vectors",
        description="S3 Vectors bucket name",
    )
    index_name: str = Field(default="papers", description="S3 Vectors index name")
