"""Graph operations produced by reconstruction."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union


@dataclass(frozen=True)
class BranchHandle:
    """Opaque token for one author's line of commits within a run.

    ``serial`` counts branch creations in the run, so a retired author
    that reappears gets a distinct handle.
    """

    author: str
    serial: int


@dataclass(frozen=True)
class CreateBranch:
    author: str
    handle: BranchHandle
    base: BranchHandle | None


@dataclass(frozen=True)
class Commit:
    branch: BranchHandle
    root_id: str
    author: str | None
    email: str | None
    timestamp: str
    comment: str
    tags: tuple[str, ...]


@dataclass(frozen=True)
class Tag:
    branch: BranchHandle
    label: str


@dataclass(frozen=True)
class Merge:
    target: BranchHandle
    source: BranchHandle
    root_id: str
    author: str | None
    email: str | None
    timestamp: str
    comment: str


@dataclass(frozen=True)
class RetireBranch:
    author: str
    handle: BranchHandle


Operation = Union[CreateBranch, Commit, Tag, Merge, RetireBranch]


def iso_timestamp(millis: int) -> str:
    """Format epoch milliseconds as ISO 8601 UTC."""
    moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds")
