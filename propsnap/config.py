"""Configuration management for propsnap."""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class StorageConfig:
    """Live data store backend configuration."""
    record_backend: str = "json"  # json, redis
    blob_backend: str = "local"  # local, s3
    working_dir: str = "./propsnap_data"
    local_blob_root: str = "./propsnap_data/blobs"
    url_signing_secret: str = "change-me"

    # Redis specific settings
    redis_url: str = "redis://localhost:6379"
    redis_password: Optional[str] = None
    redis_max_connections: int = 50
    redis_connection_timeout: float = 5.0
    redis_socket_timeout: float = 5.0

    # S3 specific settings
    s3_endpoint_url: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    s3_max_attempts: int = 3

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create config from environment variables."""
        return cls(
            record_backend=os.getenv("STORAGE_RECORD_BACKEND", "json"),
            blob_backend=os.getenv("STORAGE_BLOB_BACKEND", "local"),
            working_dir=os.getenv("STORAGE_WORKING_DIR", "./propsnap_data"),
            local_blob_root=os.getenv("STORAGE_BLOB_ROOT", "./propsnap_data/blobs"),
            url_signing_secret=os.getenv("URL_SIGNING_SECRET", "change-me"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_password=os.getenv("REDIS_PASSWORD", None),
            redis_max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "50")),
            redis_connection_timeout=float(os.getenv("REDIS_CONNECTION_TIMEOUT", "5.0")),
            redis_socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0")),
            s3_endpoint_url=os.getenv("S3_ENDPOINT_URL", None),
            s3_region=os.getenv("S3_REGION", "us-east-1"),
            s3_access_key_id=os.getenv("S3_ACCESS_KEY_ID", None),
            s3_secret_access_key=os.getenv("S3_SECRET_ACCESS_KEY", None),
            s3_max_attempts=int(os.getenv("S3_MAX_ATTEMPTS", "3")),
        )

    def __post_init__(self):
        """Validate configuration."""
        valid_record_backends = {"json", "redis"}
        valid_blob_backends = {"local", "s3"}

        if self.record_backend not in valid_record_backends:
            raise ValueError(f"Unknown record backend: {self.record_backend}. Available: {valid_record_backends}")
        if self.blob_backend not in valid_blob_backends:
            raise ValueError(f"Unknown blob backend: {self.blob_backend}. Available: {valid_blob_backends}")
        if self.s3_max_attempts <= 0:
            raise ValueError(f"s3_max_attempts must be positive, got {self.s3_max_attempts}")


@dataclass(frozen=True)
class BackupConfig:
    """Backup job, retention and import configuration."""
    retention_count: int = 10
    compression_level: int = 6
    archive_container: str = "backups"
    archive_prefix: str = "daily"
    signed_url_expiry: int = 3600  # 1 hour
    spool_max_size: int = 64 * 1024 * 1024  # archive bytes kept in memory before spilling to disk
    source_system: str = "elbtal-wohnen"
    placeholder_names: Tuple[str, ...] = (".emptyFolderPlaceholder",)
    catalog_collection: str = "backup_records"
    import_restore_files: bool = True

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls(
            retention_count=int(os.getenv("BACKUP_RETENTION_COUNT", "10")),
            compression_level=int(os.getenv("BACKUP_COMPRESSION_LEVEL", "6")),
            archive_container=os.getenv("BACKUP_CONTAINER", "backups"),
            archive_prefix=os.getenv("BACKUP_PREFIX", "daily"),
            signed_url_expiry=int(os.getenv("BACKUP_SIGNED_URL_EXPIRY", "3600")),
            spool_max_size=int(os.getenv("BACKUP_SPOOL_MAX_SIZE", str(64 * 1024 * 1024))),
            source_system=os.getenv("BACKUP_SOURCE_SYSTEM", "elbtal-wohnen"),
            import_restore_files=_env_bool("IMPORT_RESTORE_FILES", "true"),
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.retention_count <= 0:
            raise ValueError(f"retention_count must be positive, got {self.retention_count}")
        if not 0 <= self.compression_level <= 9:
            raise ValueError(f"compression_level must be between 0 and 9, got {self.compression_level}")
        if self.signed_url_expiry <= 0:
            raise ValueError(f"signed_url_expiry must be positive, got {self.signed_url_expiry}")
        if self.spool_max_size < 0:
            raise ValueError(f"spool_max_size must not be negative, got {self.spool_max_size}")
        if not self.archive_container:
            raise ValueError("archive_container must not be empty")


@dataclass(frozen=True)
class PropsnapConfig:
    """Main propsnap configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)

    @classmethod
    def from_env(cls) -> 'PropsnapConfig':
        """Create complete config from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            backup=BackupConfig.from_env(),
        )

    def to_dict(self) -> dict:
        """Flatten to the global_config dict handed to storage backends."""
        config_dict = {
            'working_dir': self.storage.working_dir,
            'archive_container': self.backup.archive_container,
        }

        if self.storage.record_backend == "redis":
            config_dict['redis_url'] = self.storage.redis_url
            config_dict['redis_password'] = self.storage.redis_password
            config_dict['redis_max_connections'] = self.storage.redis_max_connections
            config_dict['redis_connection_timeout'] = self.storage.redis_connection_timeout
            config_dict['redis_socket_timeout'] = self.storage.redis_socket_timeout

        if self.storage.blob_backend == "s3":
            config_dict['s3_endpoint_url'] = self.storage.s3_endpoint_url
            config_dict['s3_region'] = self.storage.s3_region
            config_dict['s3_access_key_id'] = self.storage.s3_access_key_id
            config_dict['s3_secret_access_key'] = self.storage.s3_secret_access_key
            config_dict['s3_max_attempts'] = self.storage.s3_max_attempts
        else:
            config_dict['local_blob_root'] = self.storage.local_blob_root
            config_dict['url_signing_secret'] = self.storage.url_signing_secret

        return config_dict
