"""In-memory version store."""

import threading
from typing import Iterable

from ..codec import ContentId, LinkCodec
from ..errors import DuplicateRootIdentifier
from ..records import VersionRecord
from .base import VersionStore


class MemoryStore(VersionStore):
    """A memory-backed version store."""

    def __init__(self, codec: LinkCodec | None = None) -> None:
        self.codec = codec or LinkCodec()
        self.memory: dict[str, dict[ContentId, VersionRecord]] = {}
        self._lock = threading.Lock()

    def append(self, collection: str, record: VersionRecord) -> None:
        with self._lock:
            log = self.memory.setdefault(collection, {})
            if record.root in log:
                raise DuplicateRootIdentifier(self.codec.encode_string(record.root))
            log[record.root] = record

    def append_many(self, collection: str, records: Iterable[VersionRecord]) -> None:
        records = list(records)
        with self._lock:
            log = self.memory.get(collection, {})
            batch: dict[ContentId, VersionRecord] = {}
            for record in records:
                if record.root in log or record.root in batch:
                    raise DuplicateRootIdentifier(
                        self.codec.encode_string(record.root)
                    )
                batch[record.root] = record
            if batch:
                self.memory.setdefault(collection, {}).update(batch)

    def get(self, collection: str, root: ContentId) -> VersionRecord | None:
        return self.memory.get(collection, {}).get(root)

    def list_versions(self, collection: str) -> list[VersionRecord]:
        return list(self.memory.get(collection, {}).values())

    def collections(self) -> list[str]:
        return sorted(name for name, log in self.memory.items() if log)

    def __contains__(self, collection: str) -> bool:
        return bool(self.memory.get(collection))

    def drop(self, collection: str) -> None:
        with self._lock:
            self.memory.pop(collection, None)
