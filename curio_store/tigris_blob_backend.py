"""
Tigris/S3-compatible implementation of blob storage.

Objects live under the "{bucket_name}/" key prefix of the configured S3
bucket, e.g. items/my-slug/versions/2024-10-20T12:00:00.000Z.md. S3 user
metadata only holds ASCII strings, so the metadata mapping is stored as a
single JSON-encoded entry.
"""
import json
import os
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from curio_store.blob_backend import BlobBackend, BlobBackendError, BlobExistsError, BlobNotFoundError

METADATA_KEY = "curio-metadata"
NOT_FOUND_CODES = ("NoSuchKey", "404", "NotFound")


def _error_code(error: ClientError) -> str:
    return str(error.response.get('Error', {}).get('Code', ''))


class TigrisBlobBackend(BlobBackend):
    """Blob backend that uses Tigris/S3-compatible object storage."""

    def __init__(
        self,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        bucket_name: Optional[str] = None,
        region: Optional[str] = None,
        key_prefix: str = "items"
    ):
        """
        Initialize Tigris backend.

        Args:
            access_key_id: AWS access key ID (defaults to AWS_ACCESS_KEY_ID env var)
            secret_access_key: AWS secret access key (defaults to AWS_SECRET_ACCESS_KEY env var)
            endpoint_url: S3 endpoint URL (defaults to AWS_ENDPOINT_URL_S3 or
                         https://fly.storage.tigris.dev)
            bucket_name: S3 bucket name (defaults to TIGRIS_BUCKET_NAME env var)
            region: AWS region (defaults to AWS_REGION or 'auto')
            key_prefix: Key prefix for all objects (default: "items")
        """
        self.access_key_id = access_key_id or os.getenv('AWS_ACCESS_KEY_ID')
        self.secret_access_key = secret_access_key or os.getenv('AWS_SECRET_ACCESS_KEY')
        self.endpoint_url = (
            endpoint_url or
            os.getenv('AWS_ENDPOINT_URL_S3', 'https://fly.storage.tigris.dev')
        )
        self.bucket_name = bucket_name or os.getenv('TIGRIS_BUCKET_NAME')
        self.region = region or os.getenv('AWS_REGION', 'auto')
        self.key_prefix = key_prefix.strip("/")

        if not self.access_key_id or not self.secret_access_key:
            raise ValueError(
                "AWS credentials are required. Set AWS_ACCESS_KEY_ID and "
                "AWS_SECRET_ACCESS_KEY environment variables or pass them as parameters."
            )

        if not self.bucket_name:
            raise ValueError(
                "Bucket name is required. Set TIGRIS_BUCKET_NAME environment variable "
                "or pass it as a parameter."
            )

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            endpoint_url=self.endpoint_url,
            region_name=self.region
        )

    def _get_object_key(self, path: str) -> str:
        """Get the S3 object key for an object path."""
        path = path.strip("/")
        return f"{self.key_prefix}/{path}" if self.key_prefix else path

    def list(self, prefix: str) -> List[str]:
        key_prefix = self._get_object_key(prefix) + "/"
        names = []
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            pages = paginator.paginate(
                Bucket=self.bucket_name,
                Prefix=key_prefix,
                Delimiter="/"
            )
            for page in pages:
                for obj in page.get('Contents', []):
                    name = obj['Key'][len(key_prefix):]
                    if name:
                        names.append(name)
        except (ClientError, BotoCoreError) as exc:
            raise BlobBackendError(f"Failed to list {prefix}: {exc}") from exc
        return sorted(names)

    def info(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=self._get_object_key(path)
            )
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                raise BlobNotFoundError(path) from exc
            raise BlobBackendError(f"Failed to read metadata for {path}: {exc}") from exc
        except BotoCoreError as exc:
            raise BlobBackendError(f"Failed to read metadata for {path}: {exc}") from exc

        raw = response.get('Metadata', {}).get(METADATA_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise BlobBackendError(f"Corrupt metadata for {path}: {exc}") from exc

    def download(self, path: str) -> str:
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=self._get_object_key(path)
            )
            return response['Body'].read().decode('utf-8')
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                raise BlobNotFoundError(path) from exc
            raise BlobBackendError(f"Failed to download {path}: {exc}") from exc
        except (BotoCoreError, UnicodeDecodeError) as exc:
            raise BlobBackendError(f"Failed to download {path}: {exc}") from exc

    def upload(
        self,
        path: str,
        content: str,
        metadata: Dict[str, Any],
        upsert: bool = False,
        content_type: str = "text/markdown"
    ) -> None:
        """
        Upload an object to S3.

        Without upsert the write is conditional on the key not existing
        (If-None-Match: *).
        """
        params = {
            'Bucket': self.bucket_name,
            'Key': self._get_object_key(path),
            'Body': content.encode('utf-8'),
            'ContentType': f"{content_type}; charset=utf-8",
            'Metadata': {METADATA_KEY: json.dumps(metadata)},
        }
        if upsert:
            params['CacheControl'] = 'no-cache, no-store, must-revalidate'
        else:
            params['IfNoneMatch'] = '*'

        try:
            self.s3_client.put_object(**params)
        except ClientError as exc:
            if _error_code(exc) in ("PreconditionFailed", "412"):
                raise BlobExistsError(path) from exc
            raise BlobBackendError(f"Failed to upload {path}: {exc}") from exc
        except BotoCoreError as exc:
            raise BlobBackendError(f"Failed to upload {path}: {exc}") from exc

    def check_access(self) -> None:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except (ClientError, BotoCoreError) as exc:
            raise BlobBackendError(f"Cannot access bucket {self.bucket_name}: {exc}") from exc
