"""Merge importer: re-ingests a backup (or lead export) archive into the live store.

Only collections known to the registry are read, whatever the archive holds.
Each row is merged on its own: a failing row becomes a skip plus an error
string and the import carries on. The whole import fails only when the
archive cannot be opened or a required collection file is missing.
"""

import io
import json
import zipfile
from functools import partial
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, Optional, Sequence, Set, Tuple

from ..base import BaseBlobStore, BaseRecordStore, Row, StorageError
from ..collections import CollectionRegistry, CollectionSpec, ConflictPolicy
from .._utils import logger
from .archive import MANIFEST_PATH
from .codec import iter_records
from .errors import ArchiveUnreadableError, MissingCollectionFileError, RowImportError
from .models import CollectionStats, FileImportStats, ImportResult, Outcome, RowOutcome

SUMMARY_LABELS = {
    "contact_requests": "contacts",
    "lead_documents": "lead docs",
    "user_documents": "user docs",
}

RowApplier = Callable[[Row], Awaitable[Tuple[Any, Outcome]]]


async def iter_row_outcomes(rows: Iterable[Row], apply: RowApplier) -> AsyncIterator[RowOutcome]:
    """Apply ``apply`` to each row, yielding one RowOutcome per row.

    Any exception raised for a row turns into a SKIPPED outcome carrying the
    error; iteration always continues with the next row.
    """
    for index, row in enumerate(rows):
        try:
            key, outcome = await apply(row)
        except Exception as e:
            yield RowOutcome(index=index, key=getattr(e, "key", None), outcome=Outcome.SKIPPED, error=str(e))
            continue
        yield RowOutcome(index=index, key=key, outcome=outcome)


def _describe_failure(collection: str, outcome: RowOutcome) -> str:
    where = f"{collection} {outcome.key}" if outcome.key is not None else f"{collection} row {outcome.index + 1}"
    return f"Error importing {where}: {outcome.error}"


class MergeImporter:
    def __init__(
        self,
        record_store: BaseRecordStore,
        blob_store: BaseBlobStore,
        registry: CollectionRegistry,
        containers: Sequence[str],
        restore_files: bool = True,
    ):
        self.record_store = record_store
        self.blob_store = blob_store
        self.registry = registry
        self.containers = set(containers)
        self.restore_files = restore_files

    async def import_archive(self, data: bytes, restore_files: Optional[bool] = None) -> ImportResult:
        """Merge an archive's rows (and optionally its files) into the live store.

        Raises:
            ArchiveUnreadableError: the bytes are not a readable ZIP archive
            MissingCollectionFileError: a required collection has no file in the archive
        """
        if restore_files is None:
            restore_files = self.restore_files

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise ArchiveUnreadableError(f"Could not open archive: {e}") from e

        with archive:
            names = set(archive.namelist())
            sources = self._resolve_sources(names)
            self._log_manifest(archive, names)

            result = ImportResult()
            for spec in self.registry.importable_collections():
                stats = result.details.setdefault(spec.name, CollectionStats())
                path = sources.get(spec.name)
                if path is None:
                    continue

                try:
                    text = archive.read(path).decode("utf-8-sig")
                except (zipfile.BadZipFile, UnicodeDecodeError, OSError) as e:
                    message = f"Could not read {path}: {e}"
                    logger.warning(message)
                    result.errors.append(message)
                    continue

                async for outcome in iter_row_outcomes(iter_records(text), partial(self._merge_row, spec)):
                    stats.record(outcome)
                    if outcome.error is not None:
                        message = _describe_failure(spec.name, outcome)
                        logger.warning(message)
                        result.errors.append(message)

                logger.info(
                    f"Imported {spec.name} from {path}: {stats.inserted} inserted, "
                    f"{stats.updated} updated, {stats.skipped} skipped"
                )

            if restore_files:
                result.files = await self._restore_files(archive, names, result.errors)

        result.message = self._summary(result)
        logger.info(result.message)
        return result

    def _resolve_sources(self, names: Set[str]) -> Dict[str, str]:
        """Pick the archive entry for each importable collection; nothing is written before this succeeds."""
        sources = {}
        for spec in self.registry.importable_collections():
            path = next((p for p in spec.archive_paths() if p in names), None)
            if path is None:
                if spec.required:
                    raise MissingCollectionFileError(spec.name)
                logger.debug(f"No file for {spec.name} in archive")
                continue
            sources[spec.name] = path
        return sources

    def _log_manifest(self, archive: zipfile.ZipFile, names: Set[str]) -> None:
        if MANIFEST_PATH not in names:
            logger.info("Importing archive without manifest")
            return
        try:
            manifest = json.loads(archive.read(MANIFEST_PATH).decode("utf-8"))
        except (ValueError, zipfile.BadZipFile) as e:
            logger.warning(f"Ignoring unreadable manifest: {e}")
            return
        logger.info(
            f"Importing backup from {manifest.get('source_system', 'unknown')} "
            f"taken at {manifest.get('backup_date', 'unknown')}"
        )

    async def _merge_row(self, spec: CollectionSpec, row: Row) -> Tuple[Any, Outcome]:
        try:
            key = spec.primary_key(row)
        except ValueError as e:
            raise RowImportError(str(e)) from e

        try:
            existing = await self.record_store.get(spec.name, key, spec.key_column)
            if existing is None:
                await self.record_store.insert(spec.name, row, spec.key_column)
                return key, Outcome.INSERTED
            if spec.policy is ConflictPolicy.UPDATE:
                await self.record_store.update(spec.name, key, row, spec.key_column)
                return key, Outcome.UPDATED
            return key, Outcome.SKIPPED
        except StorageError as e:
            raise RowImportError(str(e), key=key) from e

    async def _restore_files(self, archive: zipfile.ZipFile, names: Set[str], errors: list) -> FileImportStats:
        """Upload storage/<container>/<name> entries that are not already present."""
        stats = FileImportStats()

        for entry in sorted(names):
            if not entry.startswith("storage/") or entry.endswith("/"):
                continue
            parts = entry.split("/", 2)
            if len(parts) != 3:
                continue
            _, container, name = parts
            if container not in self.containers:
                logger.debug(f"Ignoring file for unknown container: {entry}")
                continue
            if not name or "/" in name or name in (".", ".."):
                stats.failed += 1
                errors.append(f"Rejected unsafe file path: {entry}")
                continue

            try:
                if await self.blob_store.object_exists(container, name):
                    stats.skipped += 1
                    continue
                await self.blob_store.put_object(container, name, archive.read(entry))
                stats.uploaded += 1
            except Exception as e:
                stats.failed += 1
                message = f"Error restoring file {container}/{name}: {e}"
                logger.warning(message)
                errors.append(message)

        logger.info(f"Restored files: {stats.uploaded} uploaded, {stats.skipped} skipped, {stats.failed} failed")
        return stats

    @staticmethod
    def _summary(result: ImportResult) -> str:
        # Lead collections headline the message when present; reference data only shows up in details
        names = [name for name in result.details if name in SUMMARY_LABELS] or list(result.details)
        parts = []
        for name in names:
            stats = result.details[name]
            count = stats.inserted + stats.updated
            parts.append(f"{count} {SUMMARY_LABELS.get(name, name)}")
        return "Import completed: " + ", ".join(parts)
