"""Version store factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .codec import LinkCodec
    from .stores.base import VersionStore


def open_store(
    storage: Literal["memory", "disk"] = "memory",
    *,
    path: str | None = None,
    size_limit: int | None = None,
    codec: LinkCodec | None = None,
) -> VersionStore:
    """Create a VersionStore with sensible defaults.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. Directory path for
            the disk backend.
        size_limit: Disk backend size limit in bytes (default 1 GB).
        codec: Identifier codec (default ``LinkCodec``).

    Returns:
        A ``MemoryStore`` or ``DiskStore``.
    """
    if storage == "memory":
        if path is not None or size_limit is not None:
            raise ValueError("path and size_limit are only valid for storage='disk'")
        from .stores.memory import MemoryStore

        return MemoryStore(codec=codec)

    if storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .stores.disk import ONE_GB, DiskStore

        return DiskStore(path, size_limit=size_limit or ONE_GB, codec=codec)

    raise ValueError(f"Unknown storage: {storage!r}")
