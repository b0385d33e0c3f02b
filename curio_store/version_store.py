"""
Versioned storage of extracted item content.

Every upload for a slug is kept as an immutable version object:

    {slug}/versions/{timestamp}.md

and the longest content seen so far is copied to the canonical object:

    {slug}/default.md

Uploads whose content hash matches an existing version are skipped.
Concurrent uploads for the same slug are not serialized here; callers that
need that must lock per slug themselves.
"""
import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from curio_store.backend_pool import BackendPool
from curio_store.blob_backend import BlobBackend, BlobBackendError, BlobExistsError, BlobNotFoundError
from curio_store.errors import StorageError
from curio_store.models import (
    ExtractedMetadata,
    ItemContent,
    UploadResult,
    UploadStatus,
    VersionMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_NAME = "default"
CONTENT_EXTENSION = ".md"
CONTENT_TYPE = "text/markdown"


def get_utc_timestamp() -> str:
    """Get the current UTC time as an ISO-8601 version name, e.g. 2024-10-20T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace("+00:00", "Z")


def compute_content_hash(content: str) -> str:
    """Get the SHA-256 hex digest of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def default_path(slug: str) -> str:
    return f"{slug}/{DEFAULT_NAME}{CONTENT_EXTENSION}"


def versions_prefix(slug: str) -> str:
    return f"{slug}/versions"


def version_path(slug: str, version: str) -> str:
    return f"{versions_prefix(slug)}/{version}{CONTENT_EXTENSION}"


def summary_path(slug: str, version_name: str) -> str:
    return f"{slug}/summaries/{version_name}{CONTENT_EXTENSION}"


def _strip_extension(name: str) -> str:
    if name.endswith(CONTENT_EXTENSION):
        return name[:-len(CONTENT_EXTENSION)]
    return name


class VersionStore:
    """
    Stores, deduplicates and serves item content versions.

    Holds no state between calls apart from the backend pool.
    """

    def __init__(self, pool: BackendPool):
        """
        Initialize the store.

        Args:
            pool: Pool providing the blob backend
        """
        self.pool = pool

    def _fail(self, message: str, exc: BlobBackendError) -> StorageError:
        """
        Log a backend failure and build the error to raise.

        Missing objects and write conflicts leave the backend handle in place;
        any other failure drops it so the next call reconnects.
        """
        logger.error("%s: %s", message, exc)
        if not isinstance(exc, (BlobNotFoundError, BlobExistsError)):
            self.pool.invalidate()
        return StorageError(message)

    def _find_version_by_hash(self, backend: BlobBackend, slug: str, content_hash: str) -> Optional[str]:
        """
        Scan existing versions for one with the given content hash.

        Versions whose metadata cannot be read are skipped.

        Returns:
            Version name of the first match, or None
        """
        try:
            names = backend.list(versions_prefix(slug))
        except BlobBackendError as exc:
            raise self._fail(f"Failed to list versions for {slug}", exc) from exc

        for name in names:
            try:
                metadata = backend.info(f"{versions_prefix(slug)}/{name}")
            except BlobBackendError as exc:
                logger.warning("Failed to read metadata for version %s of %s: %s", name, slug, exc)
                continue
            if metadata and metadata.get("hash") == content_hash:
                return metadata.get("timestamp") or _strip_extension(name)
        return None

    def _read_default_metadata(self, backend: BlobBackend, slug: str) -> Optional[VersionMetadata]:
        try:
            metadata = backend.info(default_path(slug))
        except BlobNotFoundError:
            logger.debug("No main content for %s yet", slug)
            return None
        except BlobBackendError as exc:
            raise self._fail(f"Failed to read main file metadata for {slug}", exc) from exc
        if not metadata:
            return None
        return VersionMetadata.from_dict(metadata)

    @staticmethod
    def _serialize_metadata(version_metadata: VersionMetadata) -> Dict[str, Any]:
        try:
            return json.loads(json.dumps(version_metadata.to_dict()))
        except (TypeError, ValueError) as exc:
            logger.error("Failed to serialize version metadata: %s", exc)
            raise StorageError("Failed to serialize version metadata") from exc

    def upload_item_content(self, slug: str, content: str, metadata: ExtractedMetadata) -> UploadResult:
        """
        Store a new version of an item's content.

        1. Skip the upload if a version with the same content hash exists
        2. Write the content as a new immutable version
        3. Copy it to the default object if there is no default yet or the
           new content is strictly longer than the current default

        Args:
            slug: Item slug
            content: Extracted article text
            metadata: Descriptive metadata for the page

        Returns:
            UploadResult with the version name and whether the upload updated
            the main object, only stored a version, or was skipped

        Raises:
            StorageError: If metadata cannot be serialized or a write fails.
                A failure updating the main object leaves the new version stored.
        """
        backend = self.pool.acquire()
        timestamp = get_utc_timestamp()
        content_hash = compute_content_hash(content)

        existing_version = self._find_version_by_hash(backend, slug, content_hash)
        if existing_version is not None:
            logger.info("Content already exists, skipping upload (slug=%s, hash=%s)", slug, content_hash)
            return UploadResult(version_name=existing_version, status=UploadStatus.SKIPPED)

        file_metadata = self._serialize_metadata(VersionMetadata(
            timestamp=timestamp,
            length=len(content),
            hash=content_hash,
            metadata=metadata,
        ))

        try:
            backend.upload(
                version_path(slug, timestamp),
                content,
                file_metadata,
                upsert=False,
                content_type=CONTENT_TYPE
            )
        except BlobBackendError as exc:
            raise self._fail(f"Failed to upload version for {slug}", exc) from exc

        current = self._read_default_metadata(backend, slug)
        if current is not None and current.length >= len(content):
            logger.info(
                "Stored version %s for %s, main content is not shorter (%d >= %d)",
                timestamp, slug, current.length, len(content)
            )
            return UploadResult(version_name=timestamp, status=UploadStatus.STORED_VERSION)

        try:
            backend.upload(
                default_path(slug),
                content,
                file_metadata,
                upsert=True,
                content_type=CONTENT_TYPE
            )
        except BlobBackendError as exc:
            raise self._fail(f"Failed to update main file for {slug}", exc) from exc

        logger.info("Updated main content for %s to version %s", slug, timestamp)
        return UploadResult(version_name=timestamp, status=UploadStatus.UPDATED_MAIN)

    def get_item_content(self, slug: str, version: Optional[str] = None) -> ItemContent:
        """
        Get an item's content, falling back to the default object.

        Args:
            slug: Item slug
            version: Version to read, or None for the default object

        Returns:
            ItemContent. Its version is None when the default object was
            served, including when the requested version was missing.

        Raises:
            StorageError: If the default object or its metadata is missing
        """
        backend = self.pool.acquire()
        path = version_path(slug, version) if version else default_path(slug)

        try:
            metadata = backend.info(path)
            if not metadata:
                raise BlobNotFoundError(path)
            content = backend.download(path)
        except BlobBackendError as exc:
            if version:
                logger.warning("Version %s of %s unavailable, serving default: %s", version, slug, exc)
                return self.get_item_content(slug, None)
            raise self._fail(f"Failed to download content for {slug}", exc) from exc

        version_name = metadata.get("timestamp", "")
        return ItemContent(
            version=version,
            version_name=version_name,
            content=content,
            summary=self._read_summary(backend, slug, version_name),
        )

    def _read_summary(self, backend: BlobBackend, slug: str, version_name: str) -> Optional[str]:
        if not version_name:
            return None
        try:
            return backend.download(summary_path(slug, version_name))
        except BlobNotFoundError:
            return None
        except BlobBackendError as exc:
            raise self._fail(f"Failed to download summary for {slug}", exc) from exc

    def get_item_metadata(self, slug: str) -> VersionMetadata:
        """
        Get the metadata of an item's default object.

        Objects written before textDirection and textLanguage existed are
        returned as left-to-right with an empty language.

        Args:
            slug: Item slug

        Returns:
            VersionMetadata of the default object

        Raises:
            StorageError: If the default object is missing or has no title
        """
        backend = self.pool.acquire()
        try:
            metadata = backend.info(default_path(slug))
        except BlobBackendError as exc:
            raise self._fail(f"Failed to get metadata for {slug}", exc) from exc

        if not metadata or not metadata.get("title"):
            logger.error("Metadata for %s has no title", slug)
            raise StorageError("Failed to verify metadata contents")

        return VersionMetadata.from_dict(metadata)

    def upload_item_summary(self, slug: str, version_name: str, summary: str) -> None:
        """
        Store a summary for a content version, replacing any previous one.

        Args:
            slug: Item slug
            version_name: Timestamp of the summarized version
            summary: Summary text

        Raises:
            StorageError: If the write fails
        """
        backend = self.pool.acquire()
        try:
            backend.upload(
                summary_path(slug, version_name),
                summary,
                {"timestamp": version_name, "length": len(summary)},
                upsert=True,
                content_type=CONTENT_TYPE
            )
        except BlobBackendError as exc:
            raise self._fail(f"Failed to upload summary for {slug}", exc) from exc
