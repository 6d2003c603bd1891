"""Tests for backup utility functions."""

import hashlib
import io
import re
from datetime import datetime, timezone

from propsnap import __version__
from propsnap.backup.utils import archive_key, compute_checksum, generate_archive_name, get_version


def test_generate_archive_name_format():
    now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)

    name = generate_archive_name(now)

    assert re.fullmatch(r"backup-2024-03-05T07-08-09-[0-9a-f]{6}\.zip", name)


def test_generate_archive_name_unique_within_second():
    now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
    names = {generate_archive_name(now) for _ in range(20)}
    assert len(names) > 1


def test_archive_key():
    assert archive_key("daily", "b.zip") == "daily/b.zip"
    assert archive_key("/daily/", "b.zip") == "daily/b.zip"
    assert archive_key("", "b.zip") == "b.zip"


def test_compute_checksum_bytes_and_fileobj():
    data = b"backup payload" * 1000
    expected = f"sha256:{hashlib.sha256(data).hexdigest()}"

    assert compute_checksum(data) == expected

    buffer = io.BytesIO(data)
    buffer.seek(100)
    assert compute_checksum(buffer) == expected
    assert buffer.tell() == 0


def test_get_version():
    assert get_version() == __version__
