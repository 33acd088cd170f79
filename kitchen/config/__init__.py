"""Configuration module."""

from kitchen.config.settings import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_RETRY_COUNT,
    KitchenSettings,
)

__all__ = [
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_RETRY_COUNT",
    "KitchenSettings",
]
