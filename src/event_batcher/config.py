"""
Configuration management for the event batcher.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_HOST = "https://app.dittofeed.com"
BATCH_ENDPOINT = "/api/public/apps/batch"


class SdkConfig(BaseSettings):
    """
    Configuration settings for the event SDK and its batching queue.

    All settings can be configured via environment variables with the EVENT_BATCHER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="EVENT_BATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Workspace settings
    write_key: Optional[str] = Field(
        default=None,
        description="Public write key used to authorize batch requests"
    )
    host: str = Field(
        default=DEFAULT_HOST,
        description="Base URL of the ingestion API"
    )

    # Batching parameters
    batch_size: int = Field(
        default=5,
        ge=1,
        description="Maximum number of events sent in a single request"
    )
    timeout_ms: int = Field(
        default=500,
        ge=0,
        description="Idle time in milliseconds before a partial batch is sent"
    )

    # Retry settings
    base_delay_ms: int = Field(
        default=500,
        ge=0,
        description="Base delay in milliseconds for exponential backoff"
    )
    retries: int = Field(
        default=5,
        ge=0,
        description="Retry attempts for a failing batch before it is dropped"
    )

    # HTTP settings
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each HTTP request"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def batch_url(self) -> str:
        """Get the full URL of the batch ingestion endpoint."""
        return self.host.rstrip("/") + BATCH_ENDPOINT


# Global config instance
_config: Optional[SdkConfig] = None


def get_config() -> SdkConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = SdkConfig()
    return _config


def set_config(config: SdkConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
