"""Version records as stored in a collection's version log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .codec import ContentId, LinkCodec


@dataclass(frozen=True)
class ParentSummary:
    """Snapshot of one side of a merge, embedded in the merge record."""

    author: str | None
    email: str | None
    timestamp: int
    comment: str = ""
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _identity_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParentSummary:
        return cls(
            author=data.get("author"),
            email=data.get("email"),
            timestamp=int(data["timestamp"]),
            comment=data.get("comment", ""),
            tags=tuple(data.get("tags", ())),
        )


@dataclass(frozen=True)
class MergeDetails:
    """The two sides being merged."""

    parent: ParentSummary
    merge_parent: ParentSummary


@dataclass(frozen=True)
class Details:
    author: str | None
    email: str | None
    timestamp: int
    comment: str = ""
    tags: tuple[str, ...] = ()
    merge: MergeDetails | None = None


@dataclass(frozen=True)
class VersionRecord:
    """One node in a collection's append-only version history.

    ``parent`` is None only for the genesis record. ``merge_parent`` and
    ``details.merge`` are set together on merge records.
    """

    root: ContentId
    parent: ContentId | None
    details: Details
    merge_parent: ContentId | None = field(default=None)

    @property
    def is_genesis(self) -> bool:
        return self.parent is None

    @property
    def is_merge(self) -> bool:
        return self.merge_parent is not None or self.details.merge is not None

    def to_dict(self, codec: LinkCodec) -> dict[str, Any]:
        """Convert to the mapping shape exchanged with the version store."""
        details = _identity_dict(self.details)
        if self.details.merge is not None:
            details["merge"] = {
                "parent": self.details.merge.parent.to_dict(),
                "mergeParent": self.details.merge.merge_parent.to_dict(),
            }
        out: dict[str, Any] = {"root": codec.encode_string(self.root)}
        if self.parent is not None:
            out["parent"] = codec.encode_string(self.parent)
        if self.merge_parent is not None:
            out["mergeParent"] = codec.encode_string(self.merge_parent)
        out["details"] = details
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], codec: LinkCodec) -> VersionRecord:
        raw = data["details"]
        merge = None
        if raw.get("merge") is not None:
            merge = MergeDetails(
                parent=ParentSummary.from_dict(raw["merge"]["parent"]),
                merge_parent=ParentSummary.from_dict(raw["merge"]["mergeParent"]),
            )
        details = Details(
            author=raw.get("author"),
            email=raw.get("email"),
            timestamp=int(raw["timestamp"]),
            comment=raw.get("comment", ""),
            tags=tuple(raw.get("tags", ())),
            merge=merge,
        )
        parent = data.get("parent")
        merge_parent = data.get("mergeParent")
        return cls(
            root=codec.decode_string(data["root"]),
            parent=codec.decode_string(parent) if parent is not None else None,
            merge_parent=(
                codec.decode_string(merge_parent)
                if merge_parent is not None
                else None
            ),
            details=details,
        )


def _identity_dict(item: ParentSummary | Details) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if item.author is not None:
        out["author"] = item.author
    if item.email is not None:
        out["email"] = item.email
    out["timestamp"] = item.timestamp
    out["comment"] = item.comment
    out["tags"] = list(item.tags)
    return out
