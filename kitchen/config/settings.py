"""Pydantic Settings for the kitchen client core.

All environment variables use the KITCHEN_ prefix.
Example: KITCHEN_API_BASE_URL=https://api.example.com, KITCHEN_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# Advisory only: exposed to callers, never applied automatically.
DEFAULT_RETRY_COUNT = 3
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


class KitchenSettings(BaseSettings):
    """Client configuration validated from environment variables."""

    # Logging
    log_level: str = "INFO"
    verbose_network_logging: bool = False

    # Network
    api_base_url: str = "https://api.example.com"
    request_timeout_seconds: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
    retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0)
    image_compression_quality: float = Field(default=0.8, gt=0, le=1)
    use_sample_responses: bool = False  # Serve canned responses instead of calling the API

    # Local storage
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".perfect_kitchen")
    database_file_name: str = "perfect_kitchen.sqlite3"
    db_busy_timeout_seconds: float = Field(default=3.0, ge=0)
    db_echo: bool = False  # Log every SQL statement

    # Key-value store for auth tokens
    settings_file_name: str = "settings.json"

    model_config = {"env_prefix": "KITCHEN_"}
