"""Configuration module for application settings."""

from .settings import Settings, settings
from .storage import get_storage_client

__all__ = [
    "Settings",
    "settings",
    "get_storage_client",
]
