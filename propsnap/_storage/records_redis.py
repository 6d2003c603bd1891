"""Redis-based record store for production deployments."""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, List, Optional

try:
    import redis.asyncio as aioredis
    from redis.backoff import ExponentialBackoff
    from redis.retry import Retry
    from redis.exceptions import RedisError, ConnectionError as RedisConnectionError
    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False
    aioredis = None

from ..base import BaseRecordStore, DuplicateRecordError, RecordNotFoundError, Row, StorageError
from .._utils import logger, json_dumps


@dataclass
class RedisRecordStore(BaseRecordStore):
    """Rows stored as JSON strings under propsnap:<collection>:<key>."""

    _redis_client: Optional[Any] = field(init=False, default=None)
    _connection_pool: Optional[Any] = field(init=False, default=None)
    _initialized: bool = field(init=False, default=False)

    def __post_init__(self):
        if not REDIS_AVAILABLE:
            raise ImportError(
                "Redis support not available. Install with: pip install redis[hiredis]"
            )

        self.redis_url = self.global_config.get("redis_url", "redis://localhost:6379")
        self.redis_password = self.global_config.get("redis_password", None)
        self.max_connections = self.global_config.get("redis_max_connections", 50)
        self.socket_timeout = self.global_config.get("redis_socket_timeout", 5.0)
        self.connection_timeout = self.global_config.get("redis_connection_timeout", 5.0)

    async def _ensure_initialized(self):
        """Ensure Redis connection is initialized."""
        if self._initialized:
            return

        retry = Retry(
            ExponentialBackoff(cap=10, base=1),
            retries=3,
            supported_errors=(RedisConnectionError, TimeoutError, ConnectionError)
        )

        self._connection_pool = aioredis.ConnectionPool.from_url(
            self.redis_url,
            password=self.redis_password,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.connection_timeout,
            decode_responses=False,
            retry=retry,
        )
        self._redis_client = aioredis.Redis(
            connection_pool=self._connection_pool,
            auto_close_connection_pool=False
        )

        try:
            await self._redis_client.ping()
            logger.info(f"Connected to Redis record store at {self.redis_url}")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}")
            raise

        self._initialized = True

    @staticmethod
    def _prefix(collection: str) -> str:
        return f"propsnap:{collection}:"

    def _get_key(self, collection: str, key: Any) -> str:
        return f"{self._prefix(collection)}{key}"

    def _serialize(self, row: Row) -> bytes:
        return json_dumps(row).encode("utf-8")

    def _deserialize(self, data: Optional[bytes]) -> Optional[Row]:
        if data is None:
            return None
        try:
            return json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Corrupt row payload: {e}") from e

    async def fetch_all(self, collection: str) -> List[Row]:
        await self._ensure_initialized()

        keys = []
        async for key in self._redis_client.scan_iter(match=f"{self._prefix(collection)}*", count=1000):
            keys.append(key)
        if not keys:
            return []
        keys.sort()

        async with self._redis_client.pipeline() as pipe:
            for key in keys:
                pipe.get(key)
            results = await pipe.execute()

        return [row for row in (self._deserialize(data) for data in results) if row is not None]

    async def get(self, collection: str, key: Any, key_column: str = "id") -> Optional[Row]:
        await self._ensure_initialized()
        data = await self._redis_client.get(self._get_key(collection, key))
        return self._deserialize(data)

    async def insert(self, collection: str, row: Row, key_column: str = "id") -> None:
        key = row.get(key_column)
        if key is None:
            raise StorageError(f"Row for {collection} has no '{key_column}' value")
        await self._ensure_initialized()
        created = await self._redis_client.set(
            self._get_key(collection, key), self._serialize(row), nx=True
        )
        if not created:
            raise DuplicateRecordError(collection, key)

    async def update(self, collection: str, key: Any, row: Row, key_column: str = "id") -> None:
        await self._ensure_initialized()
        redis_key = self._get_key(collection, key)
        existing = self._deserialize(await self._redis_client.get(redis_key))
        if existing is None:
            raise RecordNotFoundError(collection, key)
        stored_key = existing.get(key_column, key)
        existing.update(row)
        existing[key_column] = stored_key
        updated = await self._redis_client.set(redis_key, self._serialize(existing), xx=True)
        if not updated:
            raise RecordNotFoundError(collection, key)

    async def delete(self, collection: str, key: Any, key_column: str = "id") -> bool:
        await self._ensure_initialized()
        removed = await self._redis_client.delete(self._get_key(collection, key))
        return bool(removed)

    async def check_health(self) -> bool:
        await self._ensure_initialized()
        return bool(await self._redis_client.ping())

    async def close(self) -> None:
        """Async cleanup of Redis connections."""
        if self._redis_client:
            await self._redis_client.close()
        if self._connection_pool:
            await self._connection_pool.disconnect()
        self._initialized = False

    def __del__(self):
        if self._initialized and self._redis_client:
            try:
                loop = asyncio.get_event_loop()
                if loop.is_running():
                    asyncio.create_task(self.close())
            except RuntimeError:
                pass
