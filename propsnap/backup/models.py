"""Data models for backup/import operations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class BackupType(str, Enum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class SnapshotStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Snapshot(BaseModel):
    """Catalog record describing one backup archive."""

    id: str = Field(..., description="Opaque snapshot identifier")
    created_at: datetime = Field(..., description="Catalog row creation timestamp")
    backup_date: datetime = Field(..., description="Logical backup timestamp")
    file_name: str
    file_path: str = Field(..., description="Archive key inside the backup container")
    file_size: Optional[int] = Field(None, description="Archive size in bytes, known once uploaded")
    backup_type: BackupType = BackupType.MANUAL
    status: SnapshotStatus = SnapshotStatus.PENDING
    includes_database: bool = True
    includes_storage: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Snapshot":
        return cls.model_validate(row)


class BackupManifest(BaseModel):
    """Contents of backup-info.json."""

    backup_date: datetime
    created_at: datetime
    source_system: str
    propsnap_version: str
    format_version: str = "1"
    collections: List[str]
    containers: List[str]
    record_counts: Dict[str, int]
    container_file_counts: Dict[str, int]
    files_included: int
    collection_errors: Dict[str, str] = Field(default_factory=dict)


class BackupResult(BaseModel):
    success: bool
    backup_id: Optional[str] = None
    file_size: Optional[int] = None
    files_included: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    warning: Optional[str] = None
    deleted_backups: List[str] = Field(default_factory=list)


class DownloadInfo(BaseModel):
    download_url: str
    file_name: str
    file_size: Optional[int] = None


class Outcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class RowOutcome:
    """What happened to one decoded row."""
    index: int
    key: Any
    outcome: Outcome
    error: Optional[str] = None


class CollectionStats(BaseModel):
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def record(self, outcome: RowOutcome) -> None:
        if outcome.outcome is Outcome.INSERTED:
            self.inserted += 1
        elif outcome.outcome is Outcome.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.skipped


class FileImportStats(BaseModel):
    uploaded: int = 0
    failed: int = 0
    skipped: int = 0


class ImportResult(BaseModel):
    """Per-invocation merge import report."""

    success: bool = True
    message: str = ""
    details: Dict[str, CollectionStats] = Field(default_factory=dict)
    files: Optional[FileImportStats] = None
    errors: List[str] = Field(default_factory=list)
