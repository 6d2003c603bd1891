"""Pydantic models for API requests and responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from propsnap.backup.models import BackupType


class BackupAction(str, Enum):
    CREATE = "create_backup"
    LIST = "list_backups"
    DOWNLOAD = "download_backup"
    DELETE = "delete_backup"


class BackupSystemRequest(BaseModel):
    # Plain string so an unknown action is answered with "Invalid action", not a validation error
    action: str = Field(..., min_length=1)
    backup_id: Optional[str] = None
    backup_type: BackupType = BackupType.MANUAL


class HealthStatus(BaseModel):
    status: str  # "healthy", "degraded", "unhealthy"
    record_store: bool
    blob_store: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
