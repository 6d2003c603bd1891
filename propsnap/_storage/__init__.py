"""Storage module with lazy loading support."""

from typing import TYPE_CHECKING

# Always import factory and registration (lightweight)
from .factory import StorageFactory, _register_backends

if TYPE_CHECKING:
    from .records_json import JsonRecordStore
    from .records_redis import RedisRecordStore
    from .blob_local import LocalBlobStore
    from .blob_s3 import S3BlobStore


def __getattr__(name):
    """Lazy import backends so redis/aioboto3 load only when used."""
    if name == "JsonRecordStore":
        from .records_json import JsonRecordStore
        return JsonRecordStore
    elif name == "RedisRecordStore":
        from .records_redis import RedisRecordStore
        return RedisRecordStore
    elif name == "LocalBlobStore":
        from .blob_local import LocalBlobStore
        return LocalBlobStore
    elif name == "S3BlobStore":
        from .blob_s3 import S3BlobStore
        return S3BlobStore
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "StorageFactory",
    "_register_backends",
    "JsonRecordStore",
    "RedisRecordStore",
    "LocalBlobStore",
    "S3BlobStore",
]
