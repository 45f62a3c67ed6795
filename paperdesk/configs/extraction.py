"""
Mathpix extraction settings.

Dependencies: pydantic_settings
System role: OCR service configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionSettings(BaseSettings):
    """Credentials and polling behaviour for the Mathpix PDF API."""

    model_config = SettingsConfigDict(
        env_prefix="MATHPIX_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_id: str = Field(default="", description="Mathpix application id")
    app_key: str = Field(default="", description="Mathpix application key")
    base_url: str = Field(
        default="https://api.mathpix.com",
        description="Mathpix API base URL",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        description="Delay between status polls of a submitted PDF",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        description="Per-request HTTP timeout",
    )
