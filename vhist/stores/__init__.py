"""Version store backends."""

from .base import VersionStore
from .disk import DiskStore
from .memory import MemoryStore

__all__ = ["DiskStore", "MemoryStore", "VersionStore"]
