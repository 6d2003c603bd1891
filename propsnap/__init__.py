__version__ = "0.3.0"
__author__ = "Elbtal Wohnen Engineering"
__url__ = "https://github.com/elbtal-wohnen/propsnap"

from .system import BackupSystem  # noqa
from .config import PropsnapConfig, StorageConfig, BackupConfig  # noqa
from .collections import (  # noqa
    CollectionRegistry,
    CollectionSpec,
    ConflictPolicy,
    DEFAULT_CONTAINERS,
    DEFAULT_REGISTRY,
)
