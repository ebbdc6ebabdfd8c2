"""Branch reconstruction: version records -> graph operations.

The root author (author of the genesis record) owns the root branch.
Every other author gets a side branch forked off the root branch the
first time they appear. Merges always land on the root branch; a merge
described only by its two parent summaries retires the non-root side.
"""

import logging
from typing import Iterable, Sequence, cast

from .codec import ContentId, LinkCodec
from .errors import (
    AmbiguousGenesis,
    DuplicateRootIdentifier,
    EmptyLog,
    MalformedRecord,
)
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
from .records import MergeDetails, ParentSummary, VersionRecord

logger = logging.getLogger(__name__)

START_TAG = "start"
MERGE_TAG = "merge"


class BranchState:
    """Per-run bookkeeping: active branches and commits already emitted."""

    def __init__(self, root_author: str) -> None:
        self.root_author = root_author
        self.ops: list[Operation] = []
        self.branches: dict[str, BranchHandle] = {}
        self.emitted: dict[str, set[str]] = {}
        self._serial = 0
        self.root_branch = self._create(root_author, base=None)

    def _create(self, author: str, base: BranchHandle | None) -> BranchHandle:
        handle = BranchHandle(author, self._serial)
        self._serial += 1
        self.branches[author] = handle
        self.ops.append(CreateBranch(author, handle, base))
        logger.debug("Created branch %s for %s", handle.serial, author)
        return handle

    def branch_for(self, author: str) -> BranchHandle:
        """Return the author's active branch, forking one off root if needed."""
        if author == self.root_author:
            return self.root_branch
        handle = self.branches.get(author)
        if handle is None:
            handle = self._create(author, base=self.root_branch)
        return handle

    def commit_if_needed(
        self,
        author: str,
        root_id: str,
        summary: ParentSummary,
        *,
        labels: tuple[str, ...] | None = None,
    ) -> None:
        """Commit on the author's branch unless (author, root_id) was emitted.

        ``labels`` overrides the tags applied after the commit
        (default: the summary's own tags).
        """
        branch = self.branch_for(author)
        seen = self.emitted.setdefault(author, set())
        if root_id in seen:
            return
        self.ops.append(
            Commit(
                branch=branch,
                root_id=root_id,
                author=summary.author,
                email=summary.email,
                timestamp=iso_timestamp(summary.timestamp),
                comment=summary.comment,
                tags=summary.tags,
            )
        )
        for label in summary.tags if labels is None else labels:
            self.ops.append(Tag(branch, label))
        seen.add(root_id)

    def merge_into_root(
        self, source: BranchHandle, root_id: str, summary: ParentSummary
    ) -> None:
        self.ops.append(
            Merge(
                target=self.root_branch,
                source=source,
                root_id=root_id,
                author=summary.author,
                email=summary.email,
                timestamp=iso_timestamp(summary.timestamp),
                comment=summary.comment,
            )
        )
        self.ops.append(Tag(self.root_branch, MERGE_TAG))
        # The merge commit lives on the root branch; later parent summaries
        # naming it must not re-commit it there.
        self.emitted.setdefault(self.root_author, set()).add(root_id)

    def retire(self, author: str) -> None:
        handle = self.branches.pop(author)
        self.ops.append(RetireBranch(author, handle))
        logger.debug("Retired branch %s for %s", handle.serial, author)


def validate(records: Sequence[VersionRecord], codec: LinkCodec) -> VersionRecord:
    """Check the whole log up front and return the genesis record.

    Raises:
        EmptyLog: No records.
        DuplicateRootIdentifier: Two records share a root.
        AmbiguousGenesis: Zero or several parentless records.
        MalformedRecord: A record with no defined place in the topology.
    """
    if not records:
        logger.warning("Rejecting empty version log")
        raise EmptyLog()

    seen: set[ContentId] = set()
    genesis: list[VersionRecord] = []
    for record in records:
        if record.root in seen:
            root = codec.encode_string(record.root)
            logger.warning("Rejecting log with duplicate root %s", root)
            raise DuplicateRootIdentifier(root)
        seen.add(record.root)
        if record.parent is None:
            genesis.append(record)

    if len(genesis) != 1:
        roots = tuple(codec.encode_string(r.root) for r in genesis)
        logger.warning("Rejecting log with %d genesis records", len(genesis))
        raise AmbiguousGenesis(
            f"Expected exactly one parentless record, found {len(genesis)}",
            roots=roots,
        )
    root_author = genesis[0].details.author
    if root_author is None:
        raise _malformed(genesis[0], codec, "genesis record has no author")

    for record in records:
        details = record.details
        if (record.merge_parent is None) != (details.merge is None):
            raise _malformed(
                record, codec, "merge parent and merge details must appear together"
            )
        if details.author is not None or record.is_genesis:
            continue
        if details.merge is None:
            raise _malformed(record, codec, "record has no author and is not a merge")
        sides = (details.merge.parent.author, details.merge.merge_parent.author)
        if None in sides:
            raise _malformed(record, codec, "merge summary has no author")
        if all(author == root_author for author in sides):
            raise _malformed(record, codec, "merge has no side off the root branch")

    return genesis[0]


def _malformed(record: VersionRecord, codec: LinkCodec, reason: str) -> MalformedRecord:
    root = codec.encode_string(record.root)
    logger.warning("Rejecting malformed record %s: %s", root, reason)
    return MalformedRecord(f"Malformed record {root}: {reason}", root=root)


def _summary(record: VersionRecord) -> ParentSummary:
    d = record.details
    return ParentSummary(d.author, d.email, d.timestamp, d.comment, d.tags)


def reconstruct(
    records: Iterable[VersionRecord],
    *,
    codec: LinkCodec | None = None,
    order: OrderFn | None = None,
) -> list[Operation]:
    """Rebuild the per-author branch topology of a version log.

    Args:
        records: Every version record of one collection, in any order.
        codec: Encodes identifiers for ``root_id`` (default ``LinkCodec``).
        order: Processing order (default ``by_timestamp``).

    Returns:
        The operations to replay on a rendering surface. The first two
        are always the root ``CreateBranch`` and the genesis ``Commit``.
    """
    codec = codec or LinkCodec()
    order = order or by_timestamp
    records = list(records)
    genesis = validate(records, codec)

    state = BranchState(genesis.details.author)
    state.commit_if_needed(
        state.root_author,
        codec.encode_string(genesis.root),
        _summary(genesis),
        labels=(START_TAG, *genesis.details.tags),
    )

    for record in order(records):
        logger.debug(
            "Version %s parent=%s merge_parent=%s author=%s ts=%d",
            codec.encode_string(record.root),
            codec.encode_string(record.parent) if record.parent else None,
            codec.encode_string(record.merge_parent) if record.merge_parent else None,
            record.details.author,
            record.details.timestamp,
        )
        if record.root == genesis.root:
            continue
        _apply(state, record, codec)

    return state.ops


def _apply(state: BranchState, record: VersionRecord, codec: LinkCodec) -> None:
    root_id = codec.encode_string(record.root)
    author = record.details.author

    if author is not None:
        if record.is_merge and author != state.root_author:
            source = state.branch_for(author)
            state.merge_into_root(source, root_id, _summary(record))
        else:
            # A merge authored by the root author lands as a plain commit
            state.commit_if_needed(author, root_id, _summary(record))
        return

    # Authorless merge: validate() guarantees both summaries and their authors
    merge = cast(MergeDetails, record.details.merge)
    sides = (
        (merge.parent, cast(ContentId, record.parent)),
        (merge.merge_parent, cast(ContentId, record.merge_parent)),
    )
    for summary, side_root in sides:
        state.commit_if_needed(
            cast(str, summary.author), codec.encode_string(side_root), summary
        )

    other = merge.parent
    if other.author == state.root_author:
        other = merge.merge_parent
    other_author = cast(str, other.author)
    source = state.branch_for(other_author)
    state.merge_into_root(source, root_id, other)
    state.retire(other_author)
