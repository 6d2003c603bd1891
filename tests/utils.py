"""Test utilities for propsnap tests."""

import io
import zipfile
from typing import Dict, Optional, Sequence, Union

from propsnap.base import BaseBlobStore, BaseRecordStore
from propsnap.collections import CollectionRegistry, CollectionSpec, ConflictPolicy
from propsnap.config import BackupConfig, PropsnapConfig
from propsnap.system import BackupSystem


def make_zip(entries: Dict[str, Union[str, bytes]]) -> bytes:
    """Build an in-memory ZIP archive from {path: text or bytes}."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path, content in entries.items():
            archive.writestr(path, content)
    return buffer.getvalue()


def read_zip(data: bytes) -> Dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


def three_collection_registry() -> CollectionRegistry:
    """Small registry where every collection is backed up and importable."""
    return CollectionRegistry([
        CollectionSpec("contacts", policy=ConflictPolicy.UPDATE, importable=True, required=True),
        CollectionSpec("notes", policy=ConflictPolicy.SKIP, importable=True),
        CollectionSpec("documents", policy=ConflictPolicy.SKIP, importable=True),
    ])


def create_test_system(
    record_store: BaseRecordStore,
    blob_store: BaseBlobStore,
    registry: Optional[CollectionRegistry] = None,
    containers: Sequence[str] = ("photos", "uploads"),
    **backup_overrides,
) -> BackupSystem:
    """BackupSystem over the given stores with test-friendly backup settings."""
    backup_kwargs = {"spool_max_size": 1024 * 1024}
    backup_kwargs.update(backup_overrides)
    config = PropsnapConfig(backup=BackupConfig(**backup_kwargs))
    return BackupSystem(
        config=config,
        registry=registry or three_collection_registry(),
        containers=containers,
        record_store=record_store,
        blob_store=blob_store,
    )
