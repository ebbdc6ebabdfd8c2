"""Disk-backed version store using diskcache."""

import json
import logging
from typing import Iterable, cast

from ..codec import ContentId, LinkCodec
from ..errors import DuplicateRootIdentifier
from ..records import VersionRecord
from .base import VersionStore

ONE_GB = 1024 * 1024 * 1024

COLLECTION_INDEX = "__collection__%s"
RECORD_KEY = "__record__%s:%s"

logger = logging.getLogger(__name__)


class DiskStore(VersionStore):
    """Version store backed by diskcache (SQLite + mmap).

    Each record is stored as JSON under ``RECORD_KEY``; a per-collection
    index lists encoded roots in append order.
    """

    def __init__(
        self,
        directory: str,
        size_limit: int = ONE_GB,
        codec: LinkCodec | None = None,
    ) -> None:
        from diskcache import Cache as DiskCache

        self.codec = codec or LinkCodec()
        self.store = DiskCache(directory, size_limit=size_limit)

    def _index(self, collection: str) -> list[str]:
        raw = cast(bytes | None, self.store.get(COLLECTION_INDEX % collection))
        if raw is None:
            return []
        return json.loads(raw)

    def _encode(self, record: VersionRecord) -> bytes:
        return json.dumps(record.to_dict(self.codec), sort_keys=True).encode()

    def _decode(self, raw: bytes) -> VersionRecord:
        return VersionRecord.from_dict(json.loads(raw), self.codec)

    def append(self, collection: str, record: VersionRecord) -> None:
        self.append_many(collection, (record,))

    def append_many(self, collection: str, records: Iterable[VersionRecord]) -> None:
        records = list(records)
        if not records:
            return
        with self.store.transact():
            index = self._index(collection)
            known = set(index)
            for record in records:
                root = self.codec.encode_string(record.root)
                if root in known:
                    raise DuplicateRootIdentifier(root)
                known.add(root)
                index.append(root)
                self.store[RECORD_KEY % (collection, root)] = self._encode(record)
            self.store[COLLECTION_INDEX % collection] = json.dumps(index).encode()
        logger.debug("Collection %s now holds %d versions", collection, len(index))

    def get(self, collection: str, root: ContentId) -> VersionRecord | None:
        key = RECORD_KEY % (collection, self.codec.encode_string(root))
        raw = cast(bytes | None, self.store.get(key))
        if raw is None:
            return None
        return self._decode(raw)

    def list_versions(self, collection: str) -> list[VersionRecord]:
        with self.store.transact():
            raw_records = [
                cast(bytes, self.store[RECORD_KEY % (collection, root)])
                for root in self._index(collection)
            ]
        return [self._decode(raw) for raw in raw_records]

    def collections(self) -> list[str]:
        prefix = COLLECTION_INDEX.replace("%s", "")
        result = []
        for key in self.store.iterkeys():
            if isinstance(key, str) and key.startswith(prefix):
                result.append(key[len(prefix):])
        return sorted(result)

    def __contains__(self, collection: str) -> bool:
        return COLLECTION_INDEX % collection in self.store

    def drop(self, collection: str) -> None:
        with self.store.transact():
            for root in self._index(collection):
                self.store.delete(RECORD_KEY % (collection, root), retry=False)
            self.store.delete(COLLECTION_INDEX % collection, retry=False)

    def close(self) -> None:
        self.store.close()
