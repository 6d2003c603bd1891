"""Tests for the snapshot catalog."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from propsnap.backup.catalog import SnapshotCatalog
from propsnap.backup.errors import SnapshotNotFoundError
from propsnap.backup.models import Snapshot, SnapshotStatus
from propsnap.base import StorageError

BASE_TIME = datetime(2026, 3, 1, 2, 0, 0, tzinfo=timezone.utc)


def make_snapshot(snapshot_id: str, minutes: int = 0, status=SnapshotStatus.COMPLETED) -> Snapshot:
    created = BASE_TIME + timedelta(minutes=minutes)
    return Snapshot(
        id=snapshot_id,
        created_at=created,
        backup_date=created,
        file_name=f"{snapshot_id}.zip",
        file_path=f"daily/{snapshot_id}.zip",
        file_size=3,
        status=status,
    )


@pytest.fixture
def catalog(record_store, blob_store):
    return SnapshotCatalog(record_store, blob_store, signed_url_expiry=60)


@pytest.mark.asyncio
async def test_insert_get_roundtrip(catalog):
    snapshot = make_snapshot("s1")
    await catalog.insert(snapshot)

    loaded = await catalog.get("s1")
    assert loaded == snapshot
    assert loaded.created_at.tzinfo is not None
    assert await catalog.get("missing") is None


@pytest.mark.asyncio
async def test_list_newest_first_with_id_tiebreak(catalog):
    await catalog.insert(make_snapshot("a", minutes=1))
    await catalog.insert(make_snapshot("c", minutes=5))
    await catalog.insert(make_snapshot("b", minutes=5))
    await catalog.insert(make_snapshot("p", minutes=9, status=SnapshotStatus.PENDING))

    assert [s.id for s in await catalog.list()] == ["p", "c", "b", "a"]
    completed = await catalog.list(status=SnapshotStatus.COMPLETED)
    assert [s.id for s in completed] == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_update_changes_status(catalog):
    snapshot = make_snapshot("s1", status=SnapshotStatus.PENDING)
    await catalog.insert(snapshot)
    await catalog.update(snapshot.model_copy(update={"status": SnapshotStatus.COMPLETED}))
    assert (await catalog.get("s1")).status == SnapshotStatus.COMPLETED


@pytest.mark.asyncio
async def test_get_download_url(catalog, blob_store):
    await blob_store.put_object("backups", "daily/s1.zip", b"zip")
    await catalog.insert(make_snapshot("s1"))

    info = await catalog.get_download_url("s1")

    assert info.file_name == "s1.zip"
    assert info.file_size == 3
    assert blob_store.verify_signed_url(info.download_url)


@pytest.mark.asyncio
async def test_get_download_url_unknown_id(catalog):
    with pytest.raises(SnapshotNotFoundError) as exc_info:
        await catalog.get_download_url("nope")
    assert exc_info.value.reason == "Backup not found"


@pytest.mark.asyncio
async def test_get_download_url_missing_blob(catalog):
    await catalog.insert(make_snapshot("s1"))
    with pytest.raises(SnapshotNotFoundError) as exc_info:
        await catalog.get_download_url("s1")
    assert exc_info.value.reason == "Backup file not found"


@pytest.mark.asyncio
async def test_delete_removes_blob_then_row(catalog, blob_store):
    await blob_store.put_object("backups", "daily/s1.zip", b"zip")
    await catalog.insert(make_snapshot("s1"))

    await catalog.delete("s1")

    assert await catalog.get("s1") is None
    assert not await blob_store.object_exists("backups", "daily/s1.zip")


@pytest.mark.asyncio
async def test_delete_removes_row_even_if_blob_delete_fails(catalog, blob_store):
    await catalog.insert(make_snapshot("s1"))
    blob_store.delete_object = AsyncMock(side_effect=StorageError("permission denied"))

    await catalog.delete("s1")

    assert await catalog.get("s1") is None


@pytest.mark.asyncio
async def test_delete_unknown_id(catalog):
    with pytest.raises(SnapshotNotFoundError):
        await catalog.delete("nope")
