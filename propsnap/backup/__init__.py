from .catalog import SnapshotCatalog
from .importer import MergeImporter, iter_row_outcomes
from .manager import BackupManager
from .models import (
    BackupManifest,
    BackupResult,
    BackupType,
    CollectionStats,
    DownloadInfo,
    FileImportStats,
    ImportResult,
    Outcome,
    RowOutcome,
    Snapshot,
    SnapshotStatus,
)

__all__ = [
    "BackupManager",
    "MergeImporter",
    "SnapshotCatalog",
    "iter_row_outcomes",
    "BackupManifest",
    "BackupResult",
    "BackupType",
    "CollectionStats",
    "DownloadInfo",
    "FileImportStats",
    "ImportResult",
    "Outcome",
    "RowOutcome",
    "Snapshot",
    "SnapshotStatus",
]
