"""
Abstract interface for blob storage backends.

A backend holds content objects addressed by a "/"-separated path, each
carrying a flat JSON-compatible metadata mapping. Implementations store
objects on the local filesystem or in Tigris/S3-compatible object storage.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BlobBackendError(Exception):
    """Raised when a backend operation fails."""


class BlobNotFoundError(BlobBackendError):
    """Raised when an object does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Object not found: {path}")
        self.path = path


class BlobExistsError(BlobBackendError):
    """Raised when a create-only write targets an existing object."""

    def __init__(self, path: str):
        super().__init__(f"Object already exists: {path}")
        self.path = path


class BlobBackend(ABC):
    """Abstract base class for blob storage backends."""

    @abstractmethod
    def list(self, prefix: str) -> List[str]:
        """
        List object names directly under a prefix.

        Args:
            prefix: Directory-like path, e.g. "my-slug/versions"

        Returns:
            Object names relative to the prefix (e.g. "2024-10-20T12:00:00.000Z.md"),
            or an empty list when nothing is stored there.
        """

    @abstractmethod
    def info(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Read an object's metadata.

        Args:
            path: Object path

        Returns:
            Metadata mapping, or None if the object exists without metadata

        Raises:
            BlobNotFoundError: If the object does not exist
        """

    @abstractmethod
    def download(self, path: str) -> str:
        """
        Read an object's content as text.

        Args:
            path: Object path

        Returns:
            Object content

        Raises:
            BlobNotFoundError: If the object does not exist
        """

    @abstractmethod
    def upload(
        self,
        path: str,
        content: str,
        metadata: Dict[str, Any],
        upsert: bool = False,
        content_type: str = "text/markdown"
    ) -> None:
        """
        Write an object with its metadata.

        Args:
            path: Object path
            content: Text content
            metadata: Flat JSON-compatible metadata mapping
            upsert: Overwrite an existing object instead of failing
            content_type: MIME type of the content

        Raises:
            BlobBackendError: If the write fails, or the object exists and upsert is False
        """

    @abstractmethod
    def check_access(self) -> None:
        """
        Verify the backend is reachable.

        Raises:
            BlobBackendError: If the backend cannot be accessed
        """
