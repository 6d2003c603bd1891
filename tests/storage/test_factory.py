"""Tests for the storage factory pattern."""

import pytest
from unittest.mock import Mock, MagicMock
from propsnap._storage.factory import StorageFactory, _register_backends
from propsnap.base import BaseBlobStore, BaseRecordStore


class TestStorageFactory:
    """Test suite for StorageFactory."""

    def setup_method(self):
        """Reset factory state before each test."""
        StorageFactory._record_backends = {}
        StorageFactory._blob_backends = {}

    def test_register_record_backend(self):
        """Verify record backend registration works."""
        mock_backend = Mock(spec=BaseRecordStore)

        StorageFactory.register_records("json", mock_backend)
        assert StorageFactory._record_backends["json"] == mock_backend

    def test_register_record_backend_not_allowed(self):
        """Verify registration fails for non-allowed record backends."""
        with pytest.raises(ValueError, match="Backend invalid not in allowed record backends"):
            StorageFactory.register_records("invalid", Mock())

    def test_register_blob_backend(self):
        """Verify blob backend registration works."""
        mock_backend = Mock(spec=BaseBlobStore)

        StorageFactory.register_blobs("s3", mock_backend)
        assert StorageFactory._blob_backends["s3"] == mock_backend

    def test_register_blob_backend_not_allowed(self):
        """Verify registration fails for non-allowed blob backends."""
        with pytest.raises(ValueError, match="Backend invalid not in allowed blob backends"):
            StorageFactory.register_blobs("invalid", Mock())

    def test_create_record_store(self):
        """Verify factory passes global_config to the backend class."""
        mock_class = MagicMock()
        mock_instance = Mock()
        mock_class.return_value = mock_instance
        StorageFactory.register_records("redis", Mock(return_value=mock_class))

        global_config = {"redis_url": "redis://cache:6379"}
        store = StorageFactory.create_record_store("redis", global_config)

        assert store == mock_instance
        mock_class.assert_called_once_with(global_config=global_config)

    def test_create_blob_store(self):
        mock_class = MagicMock()
        StorageFactory.register_blobs("local", Mock(return_value=mock_class))

        StorageFactory.create_blob_store("local", {"local_blob_root": "/tmp/blobs"})

        mock_class.assert_called_once_with(global_config={"local_blob_root": "/tmp/blobs"})

    def test_create_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown record backend: mongo"):
            StorageFactory.create_record_store("mongo", {})
        with pytest.raises(ValueError, match="Unknown blob backend: ftp"):
            StorageFactory.create_blob_store("ftp", {})

    def test_auto_registration(self):
        """Built-in backends register lazily on first use."""
        assert StorageFactory._record_backends == {}

        _register_backends()

        assert set(StorageFactory._record_backends) == {"json", "redis"}
        assert set(StorageFactory._blob_backends) == {"local", "s3"}

    def test_lazy_loaders_return_classes(self):
        _register_backends()

        from propsnap._storage.records_json import JsonRecordStore
        from propsnap._storage.blob_local import LocalBlobStore

        assert StorageFactory._record_backends["json"]() is JsonRecordStore
        assert StorageFactory._blob_backends["local"]() is LocalBlobStore

    def test_create_builtin_backends(self, mock_global_config):
        from propsnap._storage.records_json import JsonRecordStore
        from propsnap._storage.blob_local import LocalBlobStore

        records = StorageFactory.create_record_store("json", mock_global_config)
        blobs = StorageFactory.create_blob_store("local", mock_global_config)

        assert isinstance(records, JsonRecordStore)
        assert isinstance(blobs, LocalBlobStore)
