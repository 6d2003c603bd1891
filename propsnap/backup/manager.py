"""Backup job orchestration and retention."""

import uuid
from datetime import datetime
from typing import Callable, Dict, List, Sequence, Tuple

from ..base import BaseBlobStore, BaseRecordStore
from ..collections import CollectionRegistry
from ..config import BackupConfig
from .._utils import logger, utc_now
from .archive import ArchiveBuilder
from .catalog import SnapshotCatalog
from .errors import ArchiveUploadError, CatalogWriteError, SnapshotNotFoundError
from .harvester import BlobHarvester
from .models import (
    BackupManifest,
    BackupResult,
    BackupType,
    DownloadInfo,
    Snapshot,
    SnapshotStatus,
)
from .serializer import render_readme, serialize_collection
from .utils import archive_key, compute_checksum, generate_archive_name, get_version


class BackupManager:
    """Create full snapshots of the live store and keep the newest N of them."""

    def __init__(
        self,
        record_store: BaseRecordStore,
        blob_store: BaseBlobStore,
        catalog: SnapshotCatalog,
        registry: CollectionRegistry,
        containers: Sequence[str],
        config: BackupConfig = BackupConfig(),
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize backup manager.

        Args:
            record_store: Live record collections to snapshot
            blob_store: Live blob containers to snapshot; also receives the archive
            catalog: Bookkeeping for uploaded archives
            registry: Collections included in every backup
            containers: Blob containers included in every backup
            config: Retention, compression and archive location settings
            clock: Source of timestamps
        """
        self.record_store = record_store
        self.blob_store = blob_store
        self.catalog = catalog
        self.registry = registry
        self.containers = list(containers)
        self.config = config
        self.clock = clock
        self.harvester = BlobHarvester(blob_store, config.placeholder_names)

    async def create_backup(self, backup_type: BackupType = BackupType.MANUAL) -> BackupResult:
        """Build, upload and catalog a full snapshot, then apply retention.

        An upload failure is a hard failure and leaves no catalog row behind.
        A catalog failure after a successful upload is logged and reported as
        a warning on an otherwise successful result.
        """
        backup_type = BackupType(backup_type)
        started = self.clock()
        backup_id = str(uuid.uuid4())
        file_name = generate_archive_name(started)
        snapshot = Snapshot(
            id=backup_id,
            created_at=started,
            backup_date=started,
            file_name=file_name,
            file_path=archive_key(self.config.archive_prefix, file_name),
            backup_type=backup_type,
            status=SnapshotStatus.PENDING,
        )
        logger.info(f"Starting {backup_type.value} backup: {backup_id}")

        pending_recorded = await self._record_pending(snapshot)

        try:
            manifest, size, checksum = await self._build_and_upload(snapshot)
        except Exception as e:
            logger.error(f"Backup {backup_id} failed: {e}")
            if pending_recorded:
                await self._discard_pending(backup_id)
            return BackupResult(success=False, error=str(e))

        snapshot = snapshot.model_copy(update={
            "file_size": size,
            "status": SnapshotStatus.COMPLETED,
            "metadata": {
                "tables_included": manifest.collections,
                "storage_buckets": manifest.containers,
                "container_file_counts": manifest.container_file_counts,
                "record_counts": manifest.record_counts,
                "files_included": manifest.files_included,
                "checksum": checksum,
            },
        })

        warning = None
        try:
            await self._record_completed(snapshot, pending_recorded)
        except CatalogWriteError as e:
            logger.error(
                f"Archive {self.config.archive_container}/{snapshot.file_path} is orphaned: {e}"
            )
            warning = str(e)
            if pending_recorded:
                await self._mark_failed(backup_id)

        deleted = await self._apply_retention()

        logger.info(
            f"Backup complete: {backup_id} ({size:,} bytes, {manifest.files_included} files)"
        )
        return BackupResult(
            success=True,
            backup_id=backup_id,
            file_size=size,
            files_included=manifest.files_included,
            message="Backup created successfully",
            warning=warning,
            deleted_backups=deleted,
        )

    async def cleanup(self) -> List[str]:
        """Delete completed snapshots beyond the newest ``retention_count``.

        Returns the ids that were deleted. Snapshots already gone are ignored.
        """
        snapshots = await self.catalog.list(status=SnapshotStatus.COMPLETED)
        surplus = snapshots[self.config.retention_count:]

        deleted = []
        for snapshot in surplus:
            try:
                await self.catalog.delete(snapshot.id)
            except SnapshotNotFoundError:
                continue
            deleted.append(snapshot.id)

        if deleted:
            logger.info(f"Retention removed {len(deleted)} old backups")
        return deleted

    async def list_backups(self) -> List[Snapshot]:
        return await self.catalog.list()

    async def get_download_url(self, backup_id: str) -> DownloadInfo:
        return await self.catalog.get_download_url(backup_id)

    async def delete_backup(self, backup_id: str) -> None:
        await self.catalog.delete(backup_id)

    # Private helper methods

    async def _build_and_upload(self, snapshot: Snapshot) -> Tuple[BackupManifest, int, str]:
        with ArchiveBuilder(self.config.compression_level, self.config.spool_max_size) as builder:
            manifest = await self._populate(builder, snapshot)
            fileobj, size = builder.finalize(manifest.model_dump(mode="json"))
            checksum = compute_checksum(fileobj)

            try:
                await self.blob_store.put_object(
                    self.config.archive_container,
                    snapshot.file_path,
                    fileobj,
                    content_type="application/zip",
                )
            except Exception as e:
                raise ArchiveUploadError(f"Failed to upload archive: {e}") from e

        return manifest, size, checksum

    async def _populate(self, builder: ArchiveBuilder, snapshot: Snapshot) -> BackupManifest:
        """Write collections, restore notes and blobs; return the manifest describing them."""
        collections = self.registry.backup_collections()
        record_counts: Dict[str, int] = {}
        collection_errors: Dict[str, str] = {}

        for spec in collections:
            artifacts = await serialize_collection(self.record_store, spec)
            builder.add_text(spec.tabular_path, artifacts.tabular)
            builder.add_text(f"database/{spec.name}.json", artifacts.structured)
            builder.add_text(f"database/{spec.name}.sql", artifacts.sql)
            record_counts[spec.name] = artifacts.record_count
            if artifacts.error:
                collection_errors[spec.name] = artifacts.error

        builder.add_text(
            "database/README.txt",
            render_readme(snapshot.backup_date, self.registry.restore_order(), record_counts, collection_errors),
        )

        container_file_counts: Dict[str, int] = {}
        for container in self.containers:
            container_file_counts[container] = await self.harvester.harvest(container, builder)

        return BackupManifest(
            backup_date=snapshot.backup_date,
            created_at=self.clock(),
            source_system=self.config.source_system,
            propsnap_version=get_version(),
            collections=[spec.name for spec in collections],
            containers=list(self.containers),
            record_counts=record_counts,
            container_file_counts=container_file_counts,
            files_included=sum(container_file_counts.values()),
            collection_errors=collection_errors,
        )

    async def _record_pending(self, snapshot: Snapshot) -> bool:
        try:
            await self.catalog.insert(snapshot)
            return True
        except Exception as e:
            logger.warning(f"Could not record pending backup {snapshot.id}, will record on completion: {e}")
            return False

    async def _record_completed(self, snapshot: Snapshot, pending_recorded: bool) -> None:
        try:
            if pending_recorded:
                await self.catalog.update(snapshot)
            else:
                await self.catalog.insert(snapshot)
        except Exception as e:
            raise CatalogWriteError(
                f"Backup {snapshot.id} was uploaded but its catalog record could not be written: {e}"
            ) from e

    async def _discard_pending(self, backup_id: str) -> None:
        try:
            await self.catalog.delete_row(backup_id)
        except Exception as e:
            logger.error(f"Failed to remove pending catalog row {backup_id}: {e}")

    async def _mark_failed(self, backup_id: str) -> None:
        try:
            snapshot = await self.catalog.get(backup_id)
            if snapshot is not None:
                await self.catalog.update(snapshot.model_copy(update={"status": SnapshotStatus.FAILED}))
        except Exception as e:
            logger.error(f"Failed to mark backup {backup_id} as failed: {e}")

    async def _apply_retention(self) -> List[str]:
        try:
            return await self.cleanup()
        except Exception as e:
            logger.warning(f"Retention cleanup failed: {e}")
            return []
