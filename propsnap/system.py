"""Top-level wiring of stores, catalog, backup manager and importer."""

from typing import Dict, Optional, Sequence

from .base import BaseBlobStore, BaseRecordStore
from .collections import CollectionRegistry, DEFAULT_CONTAINERS, DEFAULT_REGISTRY
from .config import PropsnapConfig
from ._storage import StorageFactory
from ._utils import logger
from .backup import BackupManager, MergeImporter, SnapshotCatalog


class BackupSystem:
    """Backup, retention and merge import over one live record store and blob store.

    Stores are built from the configuration unless passed in explicitly.
    """

    def __init__(
        self,
        config: Optional[PropsnapConfig] = None,
        registry: CollectionRegistry = DEFAULT_REGISTRY,
        containers: Sequence[str] = DEFAULT_CONTAINERS,
        record_store: Optional[BaseRecordStore] = None,
        blob_store: Optional[BaseBlobStore] = None,
    ):
        self.config = config or PropsnapConfig()
        self.registry = registry
        self.containers = list(containers)

        global_config = self.config.to_dict()
        self.record_store = record_store or StorageFactory.create_record_store(
            self.config.storage.record_backend, global_config
        )
        self.blob_store = blob_store or StorageFactory.create_blob_store(
            self.config.storage.blob_backend, global_config
        )

        backup = self.config.backup
        self.catalog = SnapshotCatalog(
            self.record_store,
            self.blob_store,
            collection=backup.catalog_collection,
            archive_container=backup.archive_container,
            signed_url_expiry=backup.signed_url_expiry,
        )
        self.manager = BackupManager(
            self.record_store,
            self.blob_store,
            self.catalog,
            registry,
            self.containers,
            config=backup,
        )
        self.importer = MergeImporter(
            self.record_store,
            self.blob_store,
            registry,
            self.containers,
            restore_files=backup.import_restore_files,
        )
        logger.info(
            f"BackupSystem ready: records={type(self.record_store).__name__}, "
            f"blobs={type(self.blob_store).__name__}, {len(registry)} collections, "
            f"{len(self.containers)} containers"
        )

    async def check_health(self) -> Dict[str, bool]:
        """Reachability of both stores; a raising check counts as unreachable."""
        health = {}
        for name, store in (("record_store", self.record_store), ("blob_store", self.blob_store)):
            try:
                health[name] = bool(await store.check_health())
            except Exception as e:
                logger.warning(f"{name} health check failed: {e}")
                health[name] = False
        return health

    async def close(self) -> None:
        await self.record_store.close()
