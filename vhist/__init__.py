"""vhist: Version-history graph reconstruction."""

from .codec import ContentId, LinkCodec, link_codec
from .emit import GraphSurface, TextSurface, replay
from .errors import (
    AmbiguousGenesis,
    DuplicateRootIdentifier,
    EmptyLog,
    HistoryError,
    MalformedRecord,
)
from .graph import render_history
from .ops import (
    BranchHandle,
    Commit,
    CreateBranch,
    Merge,
    Operation,
    RetireBranch,
    Tag,
    iso_timestamp,
)
from .ordering import OrderFn, by_timestamp
from .reconstruct import MERGE_TAG, START_TAG, BranchState, reconstruct, validate
from .records import Details, MergeDetails, ParentSummary, VersionRecord
from .store import open_store
from .stores.base import VersionStore

__all__ = [
    "AmbiguousGenesis",
    "BranchHandle",
    "BranchState",
    "Commit",
    "ContentId",
    "CreateBranch",
    "Details",
    "DuplicateRootIdentifier",
    "EmptyLog",
    "GraphSurface",
    "HistoryError",
    "LinkCodec",
    "MERGE_TAG",
    "MalformedRecord",
    "Merge",
    "MergeDetails",
    "Operation",
    "OrderFn",
    "ParentSummary",
    "RetireBranch",
    "START_TAG",
    "Tag",
    "TextSurface",
    "VersionRecord",
    "VersionStore",
    "by_timestamp",
    "iso_timestamp",
    "link_codec",
    "open_store",
    "reconstruct",
    "render_history",
    "replay",
    "validate",
]
