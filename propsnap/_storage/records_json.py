"""JSON file record store: one file per collection, written through on every change."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..base import BaseRecordStore, DuplicateRecordError, RecordNotFoundError, Row, StorageError
from .._utils import logger, json_dumps


@dataclass
class JsonRecordStore(BaseRecordStore):
    _data: Dict[str, List[Row]] = field(init=False, default_factory=dict)

    def __post_init__(self):
        working_dir = self.global_config.get("working_dir", "./propsnap_data")
        self._root = Path(working_dir) / "records"
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info(f"JsonRecordStore initialized at {self._root}")

    def _file(self, collection: str) -> Path:
        return self._root / f"{collection}.json"

    def _load(self, collection: str) -> List[Row]:
        if collection not in self._data:
            path = self._file(collection)
            if path.exists():
                try:
                    with open(path, "r", encoding="utf-8") as f:
                        rows = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    raise StorageError(f"Failed to read collection {collection}: {e}") from e
                if not isinstance(rows, list):
                    raise StorageError(f"Collection file {path} does not hold a list of rows")
                self._data[collection] = rows
            else:
                self._data[collection] = []
        return self._data[collection]

    def _flush(self, collection: str, rows: List[Row]) -> None:
        """Write ``rows`` to disk, then make them the cached state of ``collection``."""
        path = self._file(collection)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(json_dumps(rows, indent=2))
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write collection {collection}: {e}") from e
        self._data[collection] = rows

    @staticmethod
    def _find(rows: List[Row], key: Any, key_column: str) -> Optional[int]:
        # Keys compare as text: "42" and 42 are the same key, as in the Redis backend
        wanted = str(key)
        for index, row in enumerate(rows):
            value = row.get(key_column)
            if value is not None and str(value) == wanted:
                return index
        return None

    async def fetch_all(self, collection: str) -> List[Row]:
        return [dict(row) for row in self._load(collection)]

    async def get(self, collection: str, key: Any, key_column: str = "id") -> Optional[Row]:
        rows = self._load(collection)
        index = self._find(rows, key, key_column)
        return dict(rows[index]) if index is not None else None

    async def insert(self, collection: str, row: Row, key_column: str = "id") -> None:
        key = row.get(key_column)
        if key is None:
            raise StorageError(f"Row for {collection} has no '{key_column}' value")
        rows = self._load(collection)
        if self._find(rows, key, key_column) is not None:
            raise DuplicateRecordError(collection, key)
        self._flush(collection, rows + [dict(row)])

    async def update(self, collection: str, key: Any, row: Row, key_column: str = "id") -> None:
        rows = self._load(collection)
        index = self._find(rows, key, key_column)
        if index is None:
            raise RecordNotFoundError(collection, key)
        merged = dict(rows[index])
        stored_key = merged[key_column]
        merged.update(row)
        merged[key_column] = stored_key
        updated = list(rows)
        updated[index] = merged
        self._flush(collection, updated)

    async def delete(self, collection: str, key: Any, key_column: str = "id") -> bool:
        rows = self._load(collection)
        index = self._find(rows, key, key_column)
        if index is None:
            return False
        self._flush(collection, rows[:index] + rows[index + 1:])
        return True

    async def check_health(self) -> bool:
        return self._root.is_dir()
