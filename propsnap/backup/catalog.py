"""Snapshot catalog: bookkeeping rows for backup archives."""

from typing import List, Optional

from ..base import BaseBlobStore, BaseRecordStore, ObjectNotFoundError
from .._utils import logger
from .errors import SnapshotNotFoundError
from .models import DownloadInfo, Snapshot, SnapshotStatus


class SnapshotCatalog:
    """Catalog rows live in a record collection; archives live in a blob container."""

    def __init__(
        self,
        record_store: BaseRecordStore,
        blob_store: BaseBlobStore,
        collection: str = "backup_records",
        archive_container: str = "backups",
        signed_url_expiry: int = 3600,
    ):
        self.record_store = record_store
        self.blob_store = blob_store
        self.collection = collection
        self.archive_container = archive_container
        self.signed_url_expiry = signed_url_expiry

    async def insert(self, snapshot: Snapshot) -> None:
        await self.record_store.insert(self.collection, snapshot.to_record())

    async def update(self, snapshot: Snapshot) -> None:
        await self.record_store.update(self.collection, snapshot.id, snapshot.to_record())

    async def get(self, snapshot_id: str) -> Optional[Snapshot]:
        row = await self.record_store.get(self.collection, snapshot_id)
        return Snapshot.from_record(row) if row is not None else None

    async def list(self, status: Optional[SnapshotStatus] = None) -> List[Snapshot]:
        """All snapshots, newest first; equal timestamps are ordered by id."""
        rows = await self.record_store.fetch_all(self.collection)
        snapshots = [Snapshot.from_record(row) for row in rows]
        if status is not None:
            snapshots = [s for s in snapshots if s.status == status]
        snapshots.sort(key=lambda s: (s.created_at, s.id), reverse=True)
        return snapshots

    async def delete_row(self, snapshot_id: str) -> bool:
        return await self.record_store.delete(self.collection, snapshot_id)

    async def get_download_url(self, snapshot_id: str) -> DownloadInfo:
        """Signed, time-limited URL for a snapshot's archive.

        Raises:
            SnapshotNotFoundError: unknown id, or the archive blob is gone
        """
        snapshot = await self.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)

        try:
            url = await self.blob_store.create_signed_url(
                self.archive_container, snapshot.file_path, self.signed_url_expiry
            )
        except ObjectNotFoundError as e:
            raise SnapshotNotFoundError(snapshot_id, "Backup file not found") from e

        return DownloadInfo(download_url=url, file_name=snapshot.file_name, file_size=snapshot.file_size)

    async def delete(self, snapshot_id: str) -> None:
        """Remove the archive blob, then the catalog row.

        A failed blob deletion is logged and the row is removed anyway.

        Raises:
            SnapshotNotFoundError: unknown id
        """
        snapshot = await self.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)

        try:
            await self.blob_store.delete_object(self.archive_container, snapshot.file_path)
        except Exception as e:
            logger.warning(
                f"Failed to delete archive {self.archive_container}/{snapshot.file_path} "
                f"for backup {snapshot_id}, removing catalog row anyway: {e}"
            )

        await self.delete_row(snapshot_id)
        logger.info(f"Deleted backup: {snapshot_id}")
