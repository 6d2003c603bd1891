"""Filesystem blob store: <root>/<container>/<key>."""

import hashlib
import hmac
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Optional, Union
from urllib.parse import parse_qs, quote, urlparse, unquote

from ..base import BaseBlobStore, ObjectInfo, ObjectNotFoundError, StorageError
from .._utils import logger


@dataclass
class LocalBlobStore(BaseBlobStore):
    """Blob store backed by a local directory tree.

    Signed URLs are file:// URLs carrying an expiry and an HMAC-SHA256
    signature, checked by verify_signed_url().
    """

    def __post_init__(self):
        self.base_path = Path(self.global_config.get("local_blob_root", "./propsnap_data/blobs")).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._secret = str(self.global_config.get("url_signing_secret", "change-me")).encode("utf-8")
        logger.info(f"LocalBlobStore initialized with base_path: {self.base_path}")

    def _get_full_path(self, container: str, key: str = "") -> Path:
        full_path = (self.base_path / container / key).resolve()
        container_root = (self.base_path / container).resolve()
        if full_path != container_root and container_root not in full_path.parents:
            raise StorageError(f"Key escapes container: {container}/{key}")
        return full_path

    async def list_objects(self, container: str, prefix: str = "") -> List[ObjectInfo]:
        folder, _, name_prefix = prefix.rpartition("/")
        directory = self._get_full_path(container, folder)
        if not directory.is_dir():
            return []

        objects = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if not entry.is_file() or not entry.name.startswith(name_prefix):
                continue
            stat = entry.stat()
            objects.append(ObjectInfo(
                key=f"{folder}/{entry.name}" if folder else entry.name,
                size=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return objects

    async def get_object(self, container: str, key: str) -> bytes:
        path = self._get_full_path(container, key)
        if not path.is_file():
            raise ObjectNotFoundError(container, key)
        return path.read_bytes()

    async def put_object(
        self,
        container: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> int:
        path = self._get_full_path(container, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        written = 0
        with open(path, "wb") as f:
            if isinstance(body, (bytes, bytearray)):
                written = f.write(body)
            else:
                for chunk in iter(lambda: body.read(1024 * 1024), b""):
                    written += f.write(chunk)

        logger.debug(f"LocalBlobStore: stored {container}/{key} ({written:,} bytes)")
        return written

    async def delete_object(self, container: str, key: str) -> bool:
        path = self._get_full_path(container, key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    async def object_exists(self, container: str, key: str) -> bool:
        return self._get_full_path(container, key).is_file()

    def _sign(self, path: str, expires: int) -> str:
        message = f"{path}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    async def create_signed_url(self, container: str, key: str, expires_in: int) -> str:
        path = self._get_full_path(container, key)
        if not path.is_file():
            raise ObjectNotFoundError(container, key)
        expires = int(time.time()) + expires_in
        posix_path = path.as_posix()
        return f"file://{quote(posix_path)}?expires={expires}&signature={self._sign(posix_path, expires)}"

    def verify_signed_url(self, url: str) -> bool:
        """Check signature and expiry of a URL produced by create_signed_url()."""
        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        try:
            expires = int(params["expires"][0])
            signature = params["signature"][0]
        except (KeyError, IndexError, ValueError):
            return False
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(signature, self._sign(unquote(parsed.path), expires))

    async def check_health(self) -> bool:
        return self.base_path.is_dir() and os.access(self.base_path, os.W_OK)
