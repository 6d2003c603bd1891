"""S3-compatible blob store (AWS S3, MinIO, Supabase storage S3 gateway)."""

import asyncio
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Union

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..base import BaseBlobStore, ObjectInfo, ObjectNotFoundError
from .._utils import logger

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _is_not_found(error: BaseException) -> bool:
    return isinstance(error, ClientError) and _error_code(error) in _NOT_FOUND_CODES


def _is_transient(error: BaseException) -> bool:
    """Retry throttling, 5xx and connection errors; never client errors."""
    if isinstance(error, ClientError):
        code = _error_code(error)
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        return code in {"SlowDown", "Throttling", "RequestTimeout"} or status >= 500
    return isinstance(error, (BotoCoreError, asyncio.TimeoutError, ConnectionError))


@dataclass
class S3BlobStore(BaseBlobStore):
    """Blob store over the S3 API using aioboto3."""

    def __post_init__(self):
        self.endpoint_url = self.global_config.get("s3_endpoint_url")
        self.max_attempts = int(self.global_config.get("s3_max_attempts", 3))
        self.health_container = self.global_config.get("archive_container", "backups")
        self.session = aioboto3.Session(
            aws_access_key_id=self.global_config.get("s3_access_key_id"),
            aws_secret_access_key=self.global_config.get("s3_secret_access_key"),
            region_name=self.global_config.get("s3_region", "us-east-1"),
        )
        logger.info(f"S3BlobStore initialized (endpoint={self.endpoint_url or 'aws'})")

    def _client(self):
        return self.session.client("s3", endpoint_url=self.endpoint_url)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )

    async def list_objects(self, container: str, prefix: str = "") -> List[ObjectInfo]:
        objects = []
        async with self._client() as s3:
            paginator = s3.get_paginator("list_objects_v2")
            async for page in paginator.paginate(Bucket=container, Prefix=prefix, Delimiter="/"):
                for item in page.get("Contents", []):
                    if item["Key"].endswith("/"):
                        continue
                    objects.append(ObjectInfo(
                        key=item["Key"],
                        size=int(item.get("Size", 0)),
                        last_modified=item.get("LastModified"),
                    ))
        objects.sort(key=lambda info: info.key)
        return objects

    async def get_object(self, container: str, key: str) -> bytes:
        async for attempt in self._retrying():
            with attempt:
                async with self._client() as s3:
                    try:
                        response = await s3.get_object(Bucket=container, Key=key)
                    except ClientError as e:
                        if _is_not_found(e):
                            raise ObjectNotFoundError(container, key) from e
                        raise
                    async with response["Body"] as stream:
                        return await stream.read()

    async def put_object(
        self,
        container: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> int:
        extra_args = {"ContentType": content_type} if content_type else {}

        async for attempt in self._retrying():
            with attempt:
                async with self._client() as s3:
                    if isinstance(body, (bytes, bytearray)):
                        await s3.put_object(Bucket=container, Key=key, Body=bytes(body), **extra_args)
                        size = len(body)
                    else:
                        body.seek(0, 2)
                        size = body.tell()
                        body.seek(0)
                        await s3.upload_fileobj(body, container, key, ExtraArgs=extra_args or None)

        logger.debug(f"S3BlobStore: stored {container}/{key} ({size:,} bytes)")
        return size

    async def delete_object(self, container: str, key: str) -> bool:
        if not await self.object_exists(container, key):
            return False
        async for attempt in self._retrying():
            with attempt:
                async with self._client() as s3:
                    await s3.delete_object(Bucket=container, Key=key)
        return True

    async def object_exists(self, container: str, key: str) -> bool:
        async with self._client() as s3:
            try:
                await s3.head_object(Bucket=container, Key=key)
                return True
            except ClientError as e:
                if _is_not_found(e):
                    return False
                raise

    async def create_signed_url(self, container: str, key: str, expires_in: int) -> str:
        if not await self.object_exists(container, key):
            raise ObjectNotFoundError(container, key)
        async with self._client() as s3:
            return await s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": container, "Key": key},
                ExpiresIn=expires_in,
            )

    async def check_health(self) -> bool:
        async with self._client() as s3:
            try:
                await s3.head_bucket(Bucket=self.health_container)
                return True
            except ClientError as e:
                logger.warning(f"S3 health check failed: {e}")
                return False
