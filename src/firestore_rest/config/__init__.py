"""Configuration module."""

from firestore_rest.config.logging import configure_logging, get_logger
from firestore_rest.config.settings import (
    DEFAULT_DATABASE_ID,
    FirestoreConfig,
    Settings,
    format_private_key,
    get_settings,
)

__all__ = [
    "DEFAULT_DATABASE_ID",
    "FirestoreConfig",
    "Settings",
    "configure_logging",
    "format_private_key",
    "get_logger",
    "get_settings",
]
