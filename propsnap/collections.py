"""Registry of the record collections and blob containers covered by backups.

The set of collections is fixed and known in advance. Backups and imports
iterate the registry instead of discovering names from the store or from an
uploaded archive, so an archive can never introduce an unexpected collection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class ConflictPolicy(str, Enum):
    """What the merge importer does when a row's key already exists."""
    UPDATE = "update"  # contact-style records
    SKIP = "skip"      # document metadata


@dataclass(frozen=True)
class CollectionSpec:
    """Shape of one record collection as seen by the backup pipeline."""
    name: str
    key_column: str = "id"
    policy: ConflictPolicy = ConflictPolicy.SKIP
    backup: bool = True
    importable: bool = False
    required: bool = False
    legacy_paths: Tuple[str, ...] = ()

    def primary_key(self, row: Dict[str, Any]) -> Any:
        """Return the row's key, rejecting rows without one."""
        key = row.get(self.key_column)
        if key is None or key == "":
            raise ValueError(f"missing primary key '{self.key_column}'")
        return key

    @property
    def tabular_path(self) -> str:
        return f"database/{self.name}.csv"

    def archive_paths(self) -> Tuple[str, ...]:
        """Candidate archive entries for this collection, preferred first."""
        return (self.tabular_path,) + tuple(self.legacy_paths)


class CollectionRegistry:
    """Ordered, name-unique set of collection specs.

    Registration order is the restore order: parents before children.
    """

    def __init__(self, specs: Iterable[CollectionSpec] = ()):
        self._specs: Dict[str, CollectionSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: CollectionSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Collection {spec.name} is already registered")
        if spec.required and not spec.importable:
            raise ValueError(f"Collection {spec.name} is required but not importable")
        self._specs[spec.name] = spec

    def get(self, name: str) -> Optional[CollectionSpec]:
        return self._specs.get(name)

    def __iter__(self) -> Iterator[CollectionSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def names(self) -> List[str]:
        return list(self._specs)

    def restore_order(self) -> List[str]:
        return [spec.name for spec in self._specs.values() if spec.backup]

    def backup_collections(self) -> List[CollectionSpec]:
        return [spec for spec in self._specs.values() if spec.backup]

    def importable_collections(self) -> List[CollectionSpec]:
        return [spec for spec in self._specs.values() if spec.importable]


DEFAULT_REGISTRY = CollectionRegistry([
    CollectionSpec("cities", importable=True),
    CollectionSpec("property_types", importable=True),
    CollectionSpec("properties", importable=True),
    CollectionSpec("profiles", importable=True),
    CollectionSpec(
        "contact_requests",
        policy=ConflictPolicy.UPDATE,
        importable=True,
        required=True,
        legacy_paths=("data/contact_requests.csv",),
    ),
    CollectionSpec("property_applications", importable=True),
    CollectionSpec(
        "lead_documents",
        policy=ConflictPolicy.SKIP,
        importable=True,
        legacy_paths=("data/lead_documents.csv",),
    ),
    CollectionSpec(
        "user_documents",
        policy=ConflictPolicy.SKIP,
        importable=True,
        legacy_paths=("data/user_documents_metadata.csv", "data/user_documents.csv"),
    ),
])

DEFAULT_CONTAINERS: Tuple[str, ...] = (
    "property-images",
    "featured-images",
    "lead-documents",
    "user-documents",
)
