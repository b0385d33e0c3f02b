"""
Local disk implementation of blob storage.

Stores each object as a file under {state_dir}/{bucket}/ with its metadata
in a JSON sidecar file next to it:

    state/items/my-slug/default.md
    state/items/my-slug/default.md.meta.json
"""
import json
import os
from typing import Any, Dict, List, Optional

from curio_store.blob_backend import BlobBackend, BlobBackendError, BlobExistsError, BlobNotFoundError

METADATA_SUFFIX = ".meta.json"


def _load_json_file(filepath: str) -> Optional[Dict[str, Any]]:
    """Load a JSON sidecar, or None if it doesn't exist."""
    if os.path.exists(filepath):
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    return None


def _save_json_file(filepath: str, data: Dict[str, Any]) -> None:
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


class LocalDiskBlobBackend(BlobBackend):
    """
    Local disk implementation of blob storage.

    Default location: state/items/
    """

    def __init__(self, state_dir: str = "state", bucket_name: str = "items"):
        """
        Initialize local disk backend.

        Args:
            state_dir: Directory for storing state files (default: "state")
            bucket_name: Subdirectory holding this bucket's objects (default: "items")
        """
        self.state_dir = state_dir
        self.bucket_name = bucket_name
        self.root_dir = os.path.join(state_dir, bucket_name)
        os.makedirs(self.root_dir, exist_ok=True)

    def _get_filepath(self, path: str) -> str:
        """Get the full file path for an object path."""
        parts = [p for p in path.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise BlobBackendError(f"Invalid object path: {path!r}")
        return os.path.join(self.root_dir, *parts)

    def list(self, prefix: str) -> List[str]:
        dirpath = os.path.join(self.root_dir, *[p for p in prefix.split("/") if p])
        if not os.path.isdir(dirpath):
            return []
        try:
            names = sorted(os.listdir(dirpath))
        except OSError as exc:
            raise BlobBackendError(f"Failed to list {prefix}: {exc}") from exc
        return [
            name for name in names
            if not name.endswith(METADATA_SUFFIX)
            and os.path.isfile(os.path.join(dirpath, name))
        ]

    def info(self, path: str) -> Optional[Dict[str, Any]]:
        filepath = self._get_filepath(path)
        if not os.path.isfile(filepath):
            raise BlobNotFoundError(path)
        try:
            return _load_json_file(filepath + METADATA_SUFFIX)
        except (OSError, json.JSONDecodeError) as exc:
            raise BlobBackendError(f"Failed to read metadata for {path}: {exc}") from exc

    def download(self, path: str) -> str:
        filepath = self._get_filepath(path)
        try:
            with open(filepath, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except FileNotFoundError as exc:
            raise BlobNotFoundError(path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise BlobBackendError(f"Failed to read {path}: {exc}") from exc

    def upload(
        self,
        path: str,
        content: str,
        metadata: Dict[str, Any],
        upsert: bool = False,
        content_type: str = "text/markdown"
    ) -> None:
        """
        Write an object and its metadata sidecar.

        Without upsert the content file is created exclusively, so an
        existing object is never replaced. The content type is implied by
        the file extension and not recorded.
        """
        filepath = self._get_filepath(path)
        try:
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
            with open(filepath, 'w' if upsert else 'x', encoding='utf-8', newline='') as f:
                f.write(content)
            _save_json_file(filepath + METADATA_SUFFIX, metadata)
        except FileExistsError as exc:
            raise BlobExistsError(path) from exc
        except (OSError, TypeError, ValueError) as exc:
            raise BlobBackendError(f"Failed to write {path}: {exc}") from exc

    def check_access(self) -> None:
        if not os.path.isdir(self.root_dir) or not os.access(self.root_dir, os.W_OK):
            raise BlobBackendError(f"Storage directory is not writable: {self.root_dir}")
