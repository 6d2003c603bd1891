"""Utility functions for backup operations."""

import hashlib
import secrets
from datetime import datetime
from typing import BinaryIO, Optional, Union

from .._utils import utc_now


def generate_archive_name(now: Optional[datetime] = None) -> str:
    """Archive file name: backup-YYYY-MM-DDTHH-MM-SS-<6 hex chars>.zip.

    The random suffix keeps two backups started within the same second apart.
    """
    timestamp = (now or utc_now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"backup-{timestamp}-{secrets.token_hex(3)}.zip"


def archive_key(prefix: str, file_name: str) -> str:
    prefix = prefix.strip("/")
    return f"{prefix}/{file_name}" if prefix else file_name


def compute_checksum(source: Union[bytes, BinaryIO]) -> str:
    """SHA-256 of bytes or a seekable file object, as 'sha256:<hex>'.

    File objects are read from the start and rewound afterwards.
    """
    sha256 = hashlib.sha256()

    if isinstance(source, (bytes, bytearray)):
        sha256.update(source)
    else:
        source.seek(0)
        for chunk in iter(lambda: source.read(8192), b""):
            sha256.update(chunk)
        source.seek(0)

    return f"sha256:{sha256.hexdigest()}"


def get_version() -> str:
    from .. import __version__
    return __version__
