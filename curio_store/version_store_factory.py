"""
Factory function for creating the version store.
"""
from typing import Optional

from curio_store.backend_pool import BackendPool
from curio_store.blob_backend_factory import create_blob_backend
from curio_store.config import Config
from curio_store.version_store import VersionStore


def create_version_store(config: Optional[Config] = None) -> VersionStore:
    """
    Create a version store backed by the configured blob backend.

    The backend is created lazily on first use and re-created after
    STORAGE_REFRESH_INTERVAL seconds (default: one hour).

    Args:
        config: Configuration to read (default: a new Config)

    Returns:
        VersionStore instance
    """
    config = config or Config()
    pool = BackendPool(
        factory=lambda: create_blob_backend(config),
        refresh_interval=config.refresh_interval
    )
    return VersionStore(pool)
