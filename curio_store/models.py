"""
Data types shared by the content store.

- ExtractedMetadata: descriptive metadata produced by the extraction pipeline
- VersionMetadata: metadata stored alongside every content object
- UploadResult / ItemContent: results of the write and read paths
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


def _parse_length(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class TextDirection(str, Enum):
    """Reading direction of an article's text."""

    LTR = "ltr"
    RTL = "rtl"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TextDirection":
        """
        Parse a stored direction value, defaulting to left-to-right.

        Args:
            value: Raw value from object metadata (may be missing or unknown)

        Returns:
            Matching TextDirection, or LTR when the value is empty or unrecognised
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.LTR
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.LTR


class UploadStatus(str, Enum):
    """Outcome of an upload."""

    UPDATED_MAIN = "UPDATED_MAIN"
    STORED_VERSION = "STORED_VERSION"
    SKIPPED = "SKIPPED"


@dataclass
class ExtractedMetadata:
    """Descriptive metadata for a saved page, supplied by the caller."""

    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    thumbnail: Optional[str] = None
    favicon: Optional[str] = None
    published_at: Optional[Union[datetime, str]] = None
    text_direction: TextDirection = TextDirection.LTR
    text_language: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase mapping stored with each object."""
        published_at = self.published_at
        if isinstance(published_at, datetime):
            published_at = published_at.isoformat()
        return {
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "thumbnail": self.thumbnail,
            "favicon": self.favicon,
            "publishedAt": published_at,
            "textDirection": TextDirection.parse(self.text_direction).value,
            "textLanguage": self.text_language,
        }


@dataclass
class VersionMetadata:
    """
    Metadata attached to every stored content object.

    Attributes:
        timestamp: Version identifier (UTC ISO-8601 upload time)
        length: Character count of the content
        hash: SHA-256 hex digest of the content, used for deduplication
        metadata: Descriptive metadata supplied at upload time
    """

    timestamp: str
    length: int
    hash: str
    metadata: ExtractedMetadata = field(default_factory=ExtractedMetadata)

    @property
    def title(self) -> Optional[str]:
        """Title of the stored page."""
        return self.metadata.title

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the flat mapping written to the blob backend."""
        data = {
            "timestamp": self.timestamp,
            "length": self.length,
            "hash": self.hash,
        }
        data.update(self.metadata.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionMetadata":
        """
        Build from a stored metadata mapping.

        Objects written before textDirection/textLanguage existed are read
        back as left-to-right with an empty language.

        Args:
            data: Flat metadata mapping read from the blob backend

        Returns:
            VersionMetadata instance
        """
        return cls(
            timestamp=data.get("timestamp", ""),
            length=_parse_length(data.get("length")),
            hash=data.get("hash", ""),
            metadata=ExtractedMetadata(
                title=data.get("title"),
                description=data.get("description"),
                author=data.get("author"),
                thumbnail=data.get("thumbnail"),
                favicon=data.get("favicon"),
                published_at=data.get("publishedAt"),
                text_direction=TextDirection.parse(data.get("textDirection")),
                text_language=data.get("textLanguage") or "",
            ),
        )


@dataclass
class UploadResult:
    """Result of storing a piece of content."""

    version_name: str
    status: UploadStatus


@dataclass
class ItemContent:
    """
    Content served for a slug.

    Attributes:
        version: Version actually served (None when the default object was served)
        version_name: Timestamp of the served content
        content: Content text
        summary: Stored summary for version_name, if any
    """

    version: Optional[str]
    version_name: str
    content: str
    summary: Optional[str] = None
