"""Storage factory for centralized backend creation."""

from typing import Callable, Dict, Type

from ..base import BaseBlobStore, BaseRecordStore


class StorageFactory:
    """Factory for creating storage backends with validation and registration."""

    _record_backends: Dict[str, Callable[[], Type[BaseRecordStore]]] = {}
    _blob_backends: Dict[str, Callable[[], Type[BaseBlobStore]]] = {}

    ALLOWED_RECORD = {"json", "redis"}
    ALLOWED_BLOB = {"local", "s3"}

    @classmethod
    def register_records(cls, name: str, backend_loader: Callable[[], Type[BaseRecordStore]]) -> None:
        """Register a record store backend.

        Args:
            name: Backend name (must be in ALLOWED_RECORD)
            backend_loader: Function that returns the record store class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_RECORD:
            raise ValueError(f"Backend {name} not in allowed record backends: {cls.ALLOWED_RECORD}")
        cls._record_backends[name] = backend_loader

    @classmethod
    def register_blobs(cls, name: str, backend_loader: Callable[[], Type[BaseBlobStore]]) -> None:
        """Register a blob store backend.

        Args:
            name: Backend name (must be in ALLOWED_BLOB)
            backend_loader: Function that returns the blob store class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_BLOB:
            raise ValueError(f"Backend {name} not in allowed blob backends: {cls.ALLOWED_BLOB}")
        cls._blob_backends[name] = backend_loader

    @classmethod
    def create_record_store(cls, backend: str, global_config: dict, **kwargs) -> BaseRecordStore:
        """Create a record store instance.

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._record_backends:
            _register_backends()
            if backend not in cls._record_backends:
                raise ValueError(f"Unknown record backend: {backend}. Available: {list(cls._record_backends.keys())}")

        backend_class = cls._record_backends[backend]()
        return backend_class(global_config=global_config, **kwargs)

    @classmethod
    def create_blob_store(cls, backend: str, global_config: dict, **kwargs) -> BaseBlobStore:
        """Create a blob store instance.

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._blob_backends:
            _register_backends()
            if backend not in cls._blob_backends:
                raise ValueError(f"Unknown blob backend: {backend}. Available: {list(cls._blob_backends.keys())}")

        backend_class = cls._blob_backends[backend]()
        return backend_class(global_config=global_config, **kwargs)


def _get_json_records():
    """Lazy loader for JSON record store."""
    from .records_json import JsonRecordStore
    return JsonRecordStore


def _get_redis_records():
    """Lazy loader for Redis record store."""
    from .records_redis import RedisRecordStore
    return RedisRecordStore


def _get_local_blobs():
    """Lazy loader for filesystem blob store."""
    from .blob_local import LocalBlobStore
    return LocalBlobStore


def _get_s3_blobs():
    """Lazy loader for S3 blob store."""
    from .blob_s3 import S3BlobStore
    return S3BlobStore


def _register_backends():
    """Register built-in backends with lazy loaders. Called when factory is first used."""
    if not StorageFactory._record_backends:
        StorageFactory.register_records("json", _get_json_records)
        StorageFactory.register_records("redis", _get_redis_records)

    if not StorageFactory._blob_backends:
        StorageFactory.register_blobs("local", _get_local_blobs)
        StorageFactory.register_blobs("s3", _get_s3_blobs)
