"""Tests for the JSON file record store."""

from unittest.mock import patch

import pytest

from propsnap._storage.records_json import JsonRecordStore
from propsnap.base import DuplicateRecordError, RecordNotFoundError, StorageError


@pytest.mark.asyncio
async def test_insert_get_fetch_all(record_store):
    await record_store.insert("contacts", {"id": 1, "name": "Anna"})
    await record_store.insert("contacts", {"id": 2, "name": "Ben"})

    assert await record_store.get("contacts", 2) == {"id": 2, "name": "Ben"}
    assert await record_store.get("contacts", 3) is None
    assert [r["id"] for r in await record_store.fetch_all("contacts")] == [1, 2]
    assert await record_store.fetch_all("empty") == []


@pytest.mark.asyncio
async def test_custom_key_column(record_store):
    await record_store.insert("cities", {"slug": "dresden", "name": "Dresden"}, key_column="slug")
    assert (await record_store.get("cities", "dresden", key_column="slug"))["name"] == "Dresden"


@pytest.mark.asyncio
async def test_insert_duplicate_and_missing_key(record_store):
    await record_store.insert("contacts", {"id": 1})
    with pytest.raises(DuplicateRecordError):
        await record_store.insert("contacts", {"id": 1})
    with pytest.raises(StorageError):
        await record_store.insert("contacts", {"name": "no id"})


@pytest.mark.asyncio
async def test_update_merges(record_store):
    await record_store.insert("contacts", {"id": 1, "name": "Anna", "status": "new"})
    await record_store.update("contacts", 1, {"status": "contacted"})
    assert await record_store.get("contacts", 1) == {"id": 1, "name": "Anna", "status": "contacted"}

    with pytest.raises(RecordNotFoundError):
        await record_store.update("contacts", 99, {"status": "x"})


@pytest.mark.asyncio
async def test_delete_is_idempotent(record_store):
    await record_store.insert("contacts", {"id": 1})
    assert await record_store.delete("contacts", 1) is True
    assert await record_store.delete("contacts", 1) is False


@pytest.mark.asyncio
async def test_returned_rows_are_copies(record_store):
    await record_store.insert("contacts", {"id": 1, "name": "Anna"})
    row = await record_store.get("contacts", 1)
    row["name"] = "changed"
    assert (await record_store.get("contacts", 1))["name"] == "Anna"


@pytest.mark.asyncio
async def test_persists_across_instances(mock_global_config):
    first = JsonRecordStore(global_config=mock_global_config)
    await first.insert("contacts", {"id": 1, "name": "Anna"})

    second = JsonRecordStore(global_config=mock_global_config)
    assert await second.get("contacts", 1) == {"id": 1, "name": "Anna"}


@pytest.mark.asyncio
async def test_corrupt_file_raises_storage_error(record_store, temp_storage_dir):
    (temp_storage_dir / "records" / "contacts.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        await record_store.fetch_all("contacts")


@pytest.mark.asyncio
async def test_health(record_store):
    assert await record_store.check_health() is True


@pytest.mark.asyncio
async def test_keys_match_as_text(record_store):
    await record_store.insert("contacts", {"id": "42", "name": "Anna"})

    assert (await record_store.get("contacts", 42))["name"] == "Anna"
    with pytest.raises(DuplicateRecordError):
        await record_store.insert("contacts", {"id": 42})

    await record_store.update("contacts", 42, {"id": 42, "name": "Anna B"})
    assert await record_store.fetch_all("contacts") == [{"id": "42", "name": "Anna B"}]
    assert await record_store.delete("contacts", 42) is True


@pytest.mark.asyncio
async def test_failed_write_leaves_cache_unchanged(record_store):
    await record_store.insert("contacts", {"id": 1, "name": "Anna"})

    with patch("propsnap._storage.records_json.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(StorageError, match="disk full"):
            await record_store.insert("contacts", {"id": 2})
        with pytest.raises(StorageError):
            await record_store.update("contacts", 1, {"name": "changed"})
        with pytest.raises(StorageError):
            await record_store.delete("contacts", 1)

    assert await record_store.get("contacts", 2) is None
    assert await record_store.fetch_all("contacts") == [{"id": 1, "name": "Anna"}]
