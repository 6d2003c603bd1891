"""Tests for configuration management."""

import os
import pytest
from unittest.mock import patch

from propsnap.config import BackupConfig, PropsnapConfig, StorageConfig


class TestStorageConfig:
    """Test storage configuration."""

    def test_defaults(self):
        config = StorageConfig()
        assert config.record_backend == "json"
        assert config.blob_backend == "local"
        assert config.redis_max_connections == 50
        assert config.s3_max_attempts == 3

    def test_from_env(self):
        """Test creating from environment variables."""
        with patch.dict(os.environ, {
            "STORAGE_RECORD_BACKEND": "redis",
            "STORAGE_BLOB_BACKEND": "s3",
            "REDIS_URL": "redis://cache:6379",
            "REDIS_MAX_CONNECTIONS": "10",
            "S3_ENDPOINT_URL": "http://minio:9000",
            "S3_MAX_ATTEMPTS": "5",
        }):
            config = StorageConfig.from_env()
            assert config.record_backend == "redis"
            assert config.blob_backend == "s3"
            assert config.redis_url == "redis://cache:6379"
            assert config.redis_max_connections == 10
            assert config.s3_endpoint_url == "http://minio:9000"
            assert config.s3_max_attempts == 5

    def test_validation(self):
        with pytest.raises(ValueError, match="Unknown record backend"):
            StorageConfig(record_backend="mongo")

        with pytest.raises(ValueError, match="Unknown blob backend"):
            StorageConfig(blob_backend="ftp")

        with pytest.raises(ValueError, match="s3_max_attempts must be positive"):
            StorageConfig(s3_max_attempts=0)


class TestBackupConfig:
    """Test backup configuration."""

    def test_defaults(self):
        config = BackupConfig()
        assert config.retention_count == 10
        assert config.archive_container == "backups"
        assert config.signed_url_expiry == 3600
        assert config.placeholder_names == (".emptyFolderPlaceholder",)
        assert config.import_restore_files is True

    def test_from_env(self):
        with patch.dict(os.environ, {
            "BACKUP_RETENTION_COUNT": "3",
            "BACKUP_COMPRESSION_LEVEL": "9",
            "BACKUP_PREFIX": "nightly",
            "IMPORT_RESTORE_FILES": "false",
        }):
            config = BackupConfig.from_env()
            assert config.retention_count == 3
            assert config.compression_level == 9
            assert config.archive_prefix == "nightly"
            assert config.import_restore_files is False

    def test_validation(self):
        with pytest.raises(ValueError, match="retention_count must be positive"):
            BackupConfig(retention_count=0)

        with pytest.raises(ValueError, match="compression_level must be between"):
            BackupConfig(compression_level=10)

        with pytest.raises(ValueError, match="signed_url_expiry must be positive"):
            BackupConfig(signed_url_expiry=-1)

        with pytest.raises(ValueError, match="archive_container must not be empty"):
            BackupConfig(archive_container="")


class TestPropsnapConfig:
    """Test main configuration."""

    def test_from_env(self):
        with patch.dict(os.environ, {"BACKUP_RETENTION_COUNT": "4", "STORAGE_WORKING_DIR": "/data"}):
            config = PropsnapConfig.from_env()
            assert config.backup.retention_count == 4
            assert config.storage.working_dir == "/data"

    def test_to_dict_local(self):
        config = PropsnapConfig()
        config_dict = config.to_dict()

        assert config_dict["working_dir"] == "./propsnap_data"
        assert config_dict["archive_container"] == "backups"
        assert config_dict["local_blob_root"] == "./propsnap_data/blobs"
        assert "redis_url" not in config_dict
        assert "s3_endpoint_url" not in config_dict

    def test_to_dict_remote_backends(self):
        config = PropsnapConfig(
            storage=StorageConfig(record_backend="redis", blob_backend="s3", s3_region="eu-central-1"),
        )
        config_dict = config.to_dict()

        assert config_dict["redis_url"] == "redis://localhost:6379"
        assert config_dict["s3_region"] == "eu-central-1"
        assert "local_blob_root" not in config_dict

    def test_frozen(self):
        config = BackupConfig()
        with pytest.raises(Exception):
            config.retention_count = 20
