"""
Factory function for creating blob backends.

Selects the appropriate storage backend based on environment variable.
"""
from typing import Optional

from curio_store.blob_backend import BlobBackend
from curio_store.config import Config
from curio_store.local_disk_blob_backend import LocalDiskBlobBackend
from curio_store.tigris_blob_backend import TigrisBlobBackend


def create_blob_backend(config: Optional[Config] = None) -> BlobBackend:
    """
    Create a blob backend based on environment configuration.

    Reads the CONTENT_STORAGE_TYPE environment variable to determine
    which implementation to use:
    - 'local' or unset: LocalDiskBlobBackend (default)
    - 'tigris': TigrisBlobBackend

    Args:
        config: Configuration to read (default: a new Config)

    Returns:
        BlobBackend: Configured backend instance

    Environment Variables:
        CONTENT_STORAGE_TYPE: Storage backend ('local' or 'tigris', default: 'local')
        CONTENT_STATE_DIR: Root directory for local storage (default: 'state')
        CONTENT_BUCKET_NAME: Bucket directory / key prefix (default: 'items')
        AWS_ACCESS_KEY_ID: Required for Tigris storage
        AWS_SECRET_ACCESS_KEY: Required for Tigris storage
        TIGRIS_BUCKET_NAME: Required for Tigris storage
    """
    config = config or Config()

    if config.storage_type == "tigris":
        return TigrisBlobBackend(key_prefix=config.bucket_name)

    # Default to local for any other value (including "local", "", etc.)
    return LocalDiskBlobBackend(state_dir=config.state_dir, bucket_name=config.bucket_name)
