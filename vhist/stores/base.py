"""Abstract version store interface."""

from abc import ABC, abstractmethod
from typing import Iterable

from ..codec import ContentId
from ..records import VersionRecord


class VersionStore(ABC):
    """Append-only log of version records, grouped by collection.

    Records are never modified once appended. Root identifiers are
    unique within a collection.
    """

    @abstractmethod
    def append(self, collection: str, record: VersionRecord) -> None:
        """Append a record.

        Raises DuplicateRootIdentifier if the collection already holds
        a record with the same root.
        """

    def append_many(self, collection: str, records: Iterable[VersionRecord]) -> None:
        """Append several records in order."""
        for record in records:
            self.append(collection, record)

    @abstractmethod
    def get(self, collection: str, root: ContentId) -> VersionRecord | None:
        """Get a record by root, or None if not found."""

    @abstractmethod
    def list_versions(self, collection: str) -> list[VersionRecord]:
        """All records of a collection in append order (empty if unknown)."""

    @abstractmethod
    def collections(self) -> list[str]:
        """Sorted names of collections holding at least one record."""

    @abstractmethod
    def drop(self, collection: str) -> None:
        """Remove a collection and all its records, if present."""

    def __contains__(self, collection: str) -> bool:
        return collection in self.collections()
