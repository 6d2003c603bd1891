"""ZIP archive builder for backup snapshots."""

import tempfile
import zipfile
from typing import Any, BinaryIO, List, Mapping, Set, Tuple

from .._utils import logger, json_dumps

MANIFEST_PATH = "backup-info.json"


class ArchiveBuilder:
    """Accumulates archive entries into a spooled temporary file.

    Entries stay in memory up to ``spool_max_size`` bytes and spill to disk
    beyond that. The manifest is written by finalize(), always as the last
    entry, so its counts describe what was actually added.

    Use as a context manager; the returned file object is only valid inside
    the ``with`` block.
    """

    def __init__(self, compression_level: int = 6, spool_max_size: int = 64 * 1024 * 1024):
        self._buffer = tempfile.SpooledTemporaryFile(max_size=spool_max_size)
        self._zip = zipfile.ZipFile(
            self._buffer,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        )
        self._entries: Set[str] = set()
        self._order: List[str] = []
        self._finalized = False

    def __enter__(self) -> "ArchiveBuilder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def entry_count(self) -> int:
        return len(self._order)

    def names(self) -> List[str]:
        return list(self._order)

    def add_bytes(self, path: str, data: bytes) -> bool:
        """Add one entry. Returns False if the path was already present."""
        if self._finalized:
            raise RuntimeError("Archive already finalized")
        if path in self._entries:
            logger.warning(f"Duplicate archive entry skipped: {path}")
            return False
        self._zip.writestr(path, data)
        self._entries.add(path)
        self._order.append(path)
        return True

    def add_text(self, path: str, text: str) -> bool:
        return self.add_bytes(path, text.encode("utf-8"))

    def finalize(self, manifest: Mapping[str, Any]) -> Tuple[BinaryIO, int]:
        """Write the manifest, close the ZIP and return (fileobj, size) rewound to 0."""
        self.add_text(MANIFEST_PATH, json_dumps(dict(manifest), indent=2))
        self._zip.close()
        self._finalized = True

        self._buffer.seek(0, 2)
        size = self._buffer.tell()
        self._buffer.seek(0)
        logger.info(f"Archive finalized: {self.entry_count} entries, {size:,} bytes")
        return self._buffer, size

    def close(self) -> None:
        if not self._finalized:
            self._zip.close()
            self._finalized = True
        self._buffer.close()
