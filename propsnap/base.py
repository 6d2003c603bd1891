"""Storage contracts for the live data store.

The relational store and the blob store are external collaborators; the backup
pipeline only talks to them through the two base classes below.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Dict, List, Optional, Union


class StorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""


class RecordNotFoundError(StorageError):
    def __init__(self, collection: str, key: Any):
        super().__init__(f"No record with key {key!r} in {collection}")
        self.collection = collection
        self.key = key


class DuplicateRecordError(StorageError):
    def __init__(self, collection: str, key: Any):
        super().__init__(f"Record with key {key!r} already exists in {collection}")
        self.collection = collection
        self.key = key


class ObjectNotFoundError(StorageError):
    def __init__(self, container: str, key: str):
        super().__init__(f"Object not found: {container}/{key}")
        self.container = container
        self.key = key


@dataclass
class ObjectInfo:
    """Information about an object in a blob container."""
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None

    @property
    def name(self) -> str:
        """Leaf file name of the object."""
        return self.key.rsplit("/", 1)[-1]


Row = Dict[str, Any]


@dataclass
class BaseRecordStore:
    """Row-oriented store of named record collections."""
    global_config: dict = field(default_factory=dict)

    async def fetch_all(self, collection: str) -> List[Row]:
        """Return every row of a collection."""
        raise NotImplementedError

    async def get(self, collection: str, key: Any, key_column: str = "id") -> Optional[Row]:
        """Return the row whose key column equals key, or None."""
        raise NotImplementedError

    async def insert(self, collection: str, row: Row, key_column: str = "id") -> None:
        """Insert a new row; raises DuplicateRecordError if the key is taken."""
        raise NotImplementedError

    async def update(self, collection: str, key: Any, row: Row, key_column: str = "id") -> None:
        """Merge row into the existing record; raises RecordNotFoundError if absent."""
        raise NotImplementedError

    async def delete(self, collection: str, key: Any, key_column: str = "id") -> bool:
        """Delete a row. Returns False when nothing was there."""
        raise NotImplementedError

    async def check_health(self) -> bool:
        return True

    async def close(self) -> None:
        pass


@dataclass
class BaseBlobStore:
    """Object store organised in named containers (buckets)."""
    global_config: dict = field(default_factory=dict)

    async def list_objects(self, container: str, prefix: str = "") -> List[ObjectInfo]:
        """List top-level objects under prefix, sorted by key."""
        raise NotImplementedError

    async def get_object(self, container: str, key: str) -> bytes:
        raise NotImplementedError

    async def put_object(
        self,
        container: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> int:
        """Store an object and return the number of bytes written."""
        raise NotImplementedError

    async def delete_object(self, container: str, key: str) -> bool:
        """Delete an object. Deleting a missing object is a no-op returning False."""
        raise NotImplementedError

    async def object_exists(self, container: str, key: str) -> bool:
        raise NotImplementedError

    async def create_signed_url(self, container: str, key: str, expires_in: int) -> str:
        """Time-limited download URL; raises ObjectNotFoundError if the object is missing."""
        raise NotImplementedError

    async def check_health(self) -> bool:
        return True
