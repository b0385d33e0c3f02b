"""
Configuration management for the content store.
Loads environment variables and provides access to configuration settings.
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)


class Config:
    """Configuration settings loaded from environment variables."""

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        load_dotenv()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value by key.

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return os.getenv(key, default)

    @property
    def storage_type(self) -> str:
        """Get the content storage backend type ('local' or 'tigris')."""
        return os.getenv("CONTENT_STORAGE_TYPE", "local").lower()

    @property
    def state_dir(self) -> str:
        """Get the root directory for local disk storage."""
        return os.getenv("CONTENT_STATE_DIR", "state")

    @property
    def bucket_name(self) -> str:
        """Get the logical bucket holding item content."""
        return os.getenv("CONTENT_BUCKET_NAME", "items")

    @property
    def refresh_interval(self) -> float:
        """
        Get the storage handle refresh interval in seconds.

        Falls back to one hour when the value is not a positive number.
        """
        value = os.getenv("STORAGE_REFRESH_INTERVAL", "3600")
        try:
            interval = float(value)
        except ValueError:
            logger.warning("Invalid STORAGE_REFRESH_INTERVAL %r, using 3600", value)
            return 3600.0
        return interval if interval > 0 else 3600.0

    @property
    def log_level(self) -> str:
        """Get the logging level name."""
        return os.getenv("LOG_LEVEL", "INFO").upper()
