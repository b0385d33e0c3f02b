"""
Unit tests for blob backend factory.
"""
import pytest

from curio_store.blob_backend_factory import create_blob_backend
from curio_store.local_disk_blob_backend import LocalDiskBlobBackend
from curio_store.tigris_blob_backend import TigrisBlobBackend


class TestBlobBackendFactory:
    """Test suite for blob backend factory."""

    @pytest.fixture(autouse=True)
    def state_dir(self, tmp_path, monkeypatch):
        """Point local storage at a temporary directory."""
        monkeypatch.setenv('CONTENT_STATE_DIR', str(tmp_path))
        monkeypatch.delenv('CONTENT_BUCKET_NAME', raising=False)
        return tmp_path

    def test_factory_returns_local_by_default(self, monkeypatch):
        """Test that factory returns LocalDiskBlobBackend by default."""
        monkeypatch.delenv('CONTENT_STORAGE_TYPE', raising=False)
        assert isinstance(create_blob_backend(), LocalDiskBlobBackend)

    def test_factory_uses_state_dir_and_bucket(self, monkeypatch, state_dir):
        """Test that local storage honours the configured directory and bucket."""
        monkeypatch.delenv('CONTENT_STORAGE_TYPE', raising=False)
        monkeypatch.setenv('CONTENT_BUCKET_NAME', 'articles')
        backend = create_blob_backend()
        assert backend.state_dir == str(state_dir)
        assert backend.bucket_name == 'articles'

    def test_factory_returns_tigris_when_set(self, monkeypatch):
        """Test that factory returns TigrisBlobBackend when configured."""
        monkeypatch.setenv('CONTENT_STORAGE_TYPE', 'TIGRIS')
        monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'test_key')
        monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'test_secret')
        monkeypatch.setenv('TIGRIS_BUCKET_NAME', 'test_bucket')
        backend = create_blob_backend()
        assert isinstance(backend, TigrisBlobBackend)
        assert backend.key_prefix == 'items'

    def test_factory_defaults_to_local_for_unknown_type(self, monkeypatch):
        """Test that factory defaults to local for unknown storage type."""
        monkeypatch.setenv('CONTENT_STORAGE_TYPE', 'unknown')
        assert isinstance(create_blob_backend(), LocalDiskBlobBackend)
