"""
Unit tests for TigrisBlobBackend.
"""
import json

import pytest

from curio_store.blob_backend import BlobBackend, BlobBackendError, BlobExistsError, BlobNotFoundError
from curio_store.tigris_blob_backend import METADATA_KEY, TigrisBlobBackend
from tests.unit.test_backend_base import BaseTigrisBackendTests


class TestTigrisBlobBackend(BaseTigrisBackendTests):
    """Test suite for TigrisBlobBackend using mocked S3."""

    @pytest.fixture
    def backend(self, mock_s3_client, monkeypatch):
        """Create a TigrisBlobBackend with mocked S3 client."""
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
        monkeypatch.setenv("TIGRIS_BUCKET_NAME", "test-bucket")
        backend = TigrisBlobBackend()
        backend.s3_client = mock_s3_client
        return backend

    def test_implements_interface(self, backend):
        """Test that TigrisBlobBackend implements BlobBackend interface."""
        assert isinstance(backend, BlobBackend)

    def test_requires_credentials(self, monkeypatch):
        """Test that missing credentials raise ValueError."""
        monkeypatch.delenv("AWS_ACCESS_KEY_ID", raising=False)
        monkeypatch.delenv("AWS_SECRET_ACCESS_KEY", raising=False)
        monkeypatch.setenv("TIGRIS_BUCKET_NAME", "test-bucket")
        with pytest.raises(ValueError):
            TigrisBlobBackend()

    def test_requires_bucket(self, monkeypatch):
        """Test that a missing bucket name raises ValueError."""
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
        monkeypatch.delenv("TIGRIS_BUCKET_NAME", raising=False)
        with pytest.raises(ValueError):
            TigrisBlobBackend()

    def test_upload_version_is_conditional(self, backend, mock_s3_client):
        """Test that uploads without upsert use If-None-Match."""
        backend.upload("slug/versions/v1.md", "body", {"title": "Café", "length": 4})

        call_kwargs = mock_s3_client.put_object.call_args[1]
        assert call_kwargs["Bucket"] == "test-bucket"
        assert call_kwargs["Key"] == "items/slug/versions/v1.md"
        assert call_kwargs["Body"] == b"body"
        assert call_kwargs["ContentType"].startswith("text/markdown")
        assert call_kwargs["IfNoneMatch"] == "*"
        raw = call_kwargs["Metadata"][METADATA_KEY]
        assert raw.isascii()
        assert json.loads(raw) == {"title": "Café", "length": 4}

    def test_upload_upsert_is_unconditional(self, backend, mock_s3_client):
        """Test that upsert uploads overwrite without a precondition."""
        backend.upload("slug/default.md", "body", {}, upsert=True)
        call_kwargs = mock_s3_client.put_object.call_args[1]
        assert "IfNoneMatch" not in call_kwargs

    def test_upload_existing_object_raises(self, backend, mock_s3_client):
        """Test that a failed precondition raises BlobExistsError."""
        mock_s3_client.put_object.side_effect = self.make_client_error("PreconditionFailed", "PutObject")
        with pytest.raises(BlobExistsError, match="already exists"):
            backend.upload("slug/versions/v1.md", "body", {})

    def test_info_returns_metadata(self, backend, mock_s3_client):
        """Test that info decodes the JSON metadata entry."""
        self.setup_mock_head_object(mock_s3_client, {"hash": "abc", "length": 3})
        assert backend.info("slug/default.md") == {"hash": "abc", "length": 3}
        mock_s3_client.head_object.assert_called_once_with(
            Bucket="test-bucket", Key="items/slug/default.md"
        )

    def test_info_without_metadata_returns_none(self, backend, mock_s3_client):
        """Test that objects without our metadata entry report None."""
        mock_s3_client.head_object.return_value = {"Metadata": {}}
        assert backend.info("slug/default.md") is None

    @pytest.mark.parametrize("code", ["NoSuchKey", "404", "NotFound"])
    def test_info_not_found(self, backend, mock_s3_client, code):
        """Test that missing objects raise BlobNotFoundError."""
        mock_s3_client.head_object.side_effect = self.make_client_error(code)
        with pytest.raises(BlobNotFoundError):
            backend.info("slug/default.md")

    def test_info_other_error(self, backend, mock_s3_client):
        """Test that other S3 errors raise BlobBackendError."""
        mock_s3_client.head_object.side_effect = self.make_client_error("AccessDenied")
        with pytest.raises(BlobBackendError) as exc_info:
            backend.info("slug/default.md")
        assert not isinstance(exc_info.value, BlobNotFoundError)

    def test_info_corrupt_metadata(self, backend, mock_s3_client):
        """Test that undecodable metadata raises BlobBackendError."""
        mock_s3_client.head_object.return_value = {"Metadata": {METADATA_KEY: "{oops"}}
        with pytest.raises(BlobBackendError):
            backend.info("slug/default.md")

    def test_download_returns_text(self, backend, mock_s3_client):
        """Test that download decodes the object body."""
        self.setup_mock_get_object(mock_s3_client, "# Héllo")
        assert backend.download("slug/default.md") == "# Héllo"

    def test_download_not_found(self, backend, mock_s3_client):
        """Test that download raises BlobNotFoundError for missing keys."""
        mock_s3_client.get_object.side_effect = self.make_client_error("NoSuchKey", "GetObject")
        with pytest.raises(BlobNotFoundError):
            backend.download("slug/default.md")

    def test_list_strips_prefix(self, backend, mock_s3_client):
        """Test that list returns names relative to the prefix."""
        paginator = mock_s3_client.get_paginator.return_value
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "items/slug/versions/b.md"}]},
            {"Contents": [{"Key": "items/slug/versions/a.md"}]},
            {},
        ]
        assert backend.list("slug/versions") == ["a.md", "b.md"]
        paginator.paginate.assert_called_once_with(
            Bucket="test-bucket", Prefix="items/slug/versions/", Delimiter="/"
        )

    def test_list_error(self, backend, mock_s3_client):
        """Test that list failures raise BlobBackendError."""
        mock_s3_client.get_paginator.return_value.paginate.side_effect = \
            self.make_client_error("AccessDenied", "ListObjectsV2")
        with pytest.raises(BlobBackendError):
            backend.list("slug/versions")

    def test_check_access(self, backend, mock_s3_client):
        """Test that check_access heads the bucket."""
        backend.check_access()
        mock_s3_client.head_bucket.assert_called_once_with(Bucket="test-bucket")

    def test_check_access_failure(self, backend, mock_s3_client):
        """Test that an inaccessible bucket raises BlobBackendError."""
        mock_s3_client.head_bucket.side_effect = self.make_client_error("403", "HeadBucket")
        with pytest.raises(BlobBackendError):
            backend.check_access()
