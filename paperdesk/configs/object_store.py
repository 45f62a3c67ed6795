"""
Object store configuration.

Bucket holding project files and every derived artifact (.mmd, .summary.md,
.chunks.json, .qa.md).

Dependencies: pydantic_settings
System role: S3 project bucket configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObjectStoreSettings(BaseSettings):
    """Settings for the S3 bucket that stores project files."""

    model_config = SettingsConfigDict(
        env_prefix="OBJECT_STORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="paperdesk-dev-projects",
        description="S3 bucket for project files and cached artifacts",
    )
    region: str = Field(
        default="us-east-1",
        description="AWS region for the bucket",
    )
