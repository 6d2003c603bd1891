"""Blob harvester: copies every object of a container into the archive."""

from typing import Iterable

from ..base import BaseBlobStore
from .._utils import logger
from .archive import ArchiveBuilder


class BlobHarvester:
    """Stream a container's objects into ``storage/<container>/<leaf>`` entries.

    Objects are processed one at a time in listing (name) order, and each
    object's bytes are released once appended. Placeholder entries are ignored.
    """

    def __init__(self, blob_store: BaseBlobStore, placeholder_names: Iterable[str] = (".emptyFolderPlaceholder",)):
        self.blob_store = blob_store
        self.placeholder_names = frozenset(placeholder_names)

    async def harvest(self, container: str, builder: ArchiveBuilder) -> int:
        """Returns the number of objects added to the archive."""
        try:
            objects = await self.blob_store.list_objects(container)
        except Exception as e:
            logger.warning(f"Failed to list container {container}, skipping it: {e}")
            return 0

        added = 0
        for info in objects:
            if info.name in self.placeholder_names:
                continue
            try:
                data = await self.blob_store.get_object(container, info.key)
            except Exception as e:
                logger.warning(f"Failed to download {container}/{info.key}: {e}")
                continue

            if builder.add_bytes(f"storage/{container}/{info.name}", data):
                added += 1
            del data

        logger.info(f"Harvested {added} objects from {container}")
        return added
