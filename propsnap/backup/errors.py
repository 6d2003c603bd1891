"""Exceptions raised by the backup / import pipeline."""


class BackupError(Exception):
    """Base class for backup pipeline errors."""


class SnapshotNotFoundError(BackupError):
    def __init__(self, backup_id: str, reason: str = "Backup not found"):
        super().__init__(f"{reason}: {backup_id}")
        self.backup_id = backup_id
        self.reason = reason


class ArchiveUploadError(BackupError):
    """The archive could not be written to durable storage."""


class CatalogWriteError(BackupError):
    """The archive was uploaded but its catalog row could not be written."""


class ImportAbortedError(BackupError):
    """An import could not start at all; nothing was written."""


class ArchiveUnreadableError(ImportAbortedError):
    pass


class MissingCollectionFileError(ImportAbortedError):
    def __init__(self, collection: str):
        super().__init__(f"No {collection} data found in import")
        self.collection = collection


class RowImportError(BackupError):
    """A single row could not be merged; the import carries on."""

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key
