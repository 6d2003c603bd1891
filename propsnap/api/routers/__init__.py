"""API routers."""

from . import backup, health, imports

__all__ = ["backup", "health", "imports"]
