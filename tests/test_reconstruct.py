"""Tests for branch reconstruction."""

import random

import pytest

from vhist import (
    AmbiguousGenesis,
    BranchHandle,
    Commit,
    ContentId,
    CreateBranch,
    Details,
    DuplicateRootIdentifier,
    EmptyLog,
    LinkCodec,
    MalformedRecord,
    Merge,
    MergeDetails,
    ParentSummary,
    RetireBranch,
    Tag,
    VersionRecord,
    reconstruct,
)

codec = LinkCodec()


def cid(name: str) -> ContentId:
    return ContentId.of(name.encode())


def rid(name: str) -> str:
    return codec.encode_string(cid(name))


def record(
    name,
    parent=None,
    *,
    author="alice",
    ts=0,
    tags=(),
    merge_parent=None,
    merge=None,
    comment=None,
):
    return VersionRecord(
        root=cid(name),
        parent=cid(parent) if parent else None,
        merge_parent=cid(merge_parent) if merge_parent else None,
        details=Details(
            author=author,
            email=f"{author}@example.com" if author else None,
            timestamp=ts,
            comment=comment if comment is not None else name,
            tags=tuple(tags),
            merge=merge,
        ),
    )


def summary(author, ts, comment="", tags=()):
    return ParentSummary(
        author=author,
        email=f"{author}@example.com",
        timestamp=ts,
        comment=comment,
        tags=tuple(tags),
    )


def kinds(ops):
    return [type(op).__name__ for op in ops]


def structural(ops):
    """Drop tags so scenarios can be compared on branch shape."""
    return [op for op in ops if not isinstance(op, Tag)]


class TestGenesis:
    def test_first_two_ops(self):
        ops = reconstruct([record("g", tags=["v1", "v2"])])
        assert ops[0] == CreateBranch("alice", BranchHandle("alice", 0), None)
        assert isinstance(ops[1], Commit)
        assert ops[1].root_id == rid("g")
        assert ops[1].branch == BranchHandle("alice", 0)

    def test_start_tag_then_own_tags(self):
        ops = reconstruct([record("g", tags=["v1", "v2"])])
        root = BranchHandle("alice", 0)
        assert ops[2:] == [Tag(root, "start"), Tag(root, "v1"), Tag(root, "v2")]

    def test_commit_metadata(self):
        ops = reconstruct([record("g", ts=1_700_000_000_123, comment="init")])
        commit = ops[1]
        assert commit.author == "alice"
        assert commit.email == "alice@example.com"
        assert commit.comment == "init"
        assert commit.timestamp == "2023-11-14T22:13:20.123+00:00"

    def test_genesis_first_even_if_not_oldest(self):
        records = [
            record("b", "g", author="bob", ts=1),
            record("g", ts=5),
        ]
        ops = reconstruct(records)
        assert ops[0].author == "alice"
        assert ops[1].root_id == rid("g")


class TestScenarios:
    def test_single_author_linear(self):
        records = [
            record("g", ts=0),
            record("c1", "g", ts=1),
            record("c2", "c1", ts=2),
        ]
        ops = structural(reconstruct(records))
        assert kinds(ops) == ["CreateBranch", "Commit", "Commit", "Commit"]
        assert [op.root_id for op in ops[1:]] == [rid("g"), rid("c1"), rid("c2")]
        assert all(op.branch.author == "alice" for op in ops[1:])

    def test_second_author_branches_off_root(self):
        records = [record("g", ts=0), record("b1", "g", author="bob", ts=1)]
        ops = structural(reconstruct(records))
        root = BranchHandle("alice", 0)
        bob = BranchHandle("bob", 1)
        assert ops[2] == CreateBranch("bob", bob, root)
        assert ops[3].branch == bob
        assert ops[3].root_id == rid("b1")
        assert len(ops) == 4

    def test_authored_merge(self):
        records = [
            record("g", ts=0),
            record("b1", "g", author="bob", ts=1),
            record(
                "m",
                "g",
                author="bob",
                ts=2,
                merge_parent="b1",
                merge=MergeDetails(summary("alice", 0), summary("bob", 1)),
            ),
        ]
        ops = reconstruct(records)
        assert kinds(structural(ops)) == [
            "CreateBranch",
            "Commit",
            "CreateBranch",
            "Commit",
            "Merge",
        ]
        merge = ops[-2]
        assert merge == Merge(
            target=BranchHandle("alice", 0),
            source=BranchHandle("bob", 1),
            root_id=rid("m"),
            author="bob",
            email="bob@example.com",
            timestamp="1970-01-01T00:00:00.002+00:00",
            comment="m",
        )
        assert ops[-1] == Tag(BranchHandle("alice", 0), "merge")

    def test_authored_merge_creates_missing_branch(self):
        records = [
            record("g", ts=0),
            record(
                "m",
                "g",
                author="carol",
                ts=1,
                merge_parent="x",
                merge=MergeDetails(summary("alice", 0), summary("carol", 0)),
            ),
        ]
        ops = structural(reconstruct(records))
        assert kinds(ops) == ["CreateBranch", "Commit", "CreateBranch", "Merge"]
        assert ops[3].source == BranchHandle("carol", 1)

    def test_authorless_merge_retires_other_side(self):
        records = [
            record("g", ts=0),
            record(
                "m",
                "g",
                author=None,
                ts=3,
                merge_parent="c1",
                merge=MergeDetails(
                    summary("alice", 0, "genesis"),
                    summary("carol", 2, "carol work", tags=["wip"]),
                ),
            ),
        ]
        ops = reconstruct(records)
        root = BranchHandle("alice", 0)
        carol = BranchHandle("carol", 1)
        assert ops[3:] == [
            CreateBranch("carol", carol, root),
            Commit(
                branch=carol,
                root_id=rid("c1"),
                author="carol",
                email="carol@example.com",
                timestamp="1970-01-01T00:00:00.002+00:00",
                comment="carol work",
                tags=("wip",),
            ),
            Tag(carol, "wip"),
            Merge(
                target=root,
                source=carol,
                root_id=rid("m"),
                author="carol",
                email="carol@example.com",
                timestamp="1970-01-01T00:00:00.002+00:00",
                comment="carol work",
            ),
            Tag(root, "merge"),
            RetireBranch("carol", carol),
        ]

    def test_authorless_merge_other_side_as_parent(self):
        records = [
            record("g", ts=0),
            record("c1", "g", author="carol", ts=1),
            record(
                "m",
                "c1",
                author=None,
                ts=2,
                merge_parent="g",
                merge=MergeDetails(summary("carol", 1), summary("alice", 0)),
            ),
        ]
        ops = structural(reconstruct(records))
        assert kinds(ops) == [
            "CreateBranch",
            "Commit",
            "CreateBranch",
            "Commit",
            "Merge",
            "RetireBranch",
        ]
        assert ops[4].source == BranchHandle("carol", 1)
        assert ops[5].author == "carol"

    def test_root_author_merge_is_plain_commit(self):
        records = [
            record("g", ts=0),
            record("b1", "g", author="bob", ts=1),
            record(
                "m",
                "g",
                author="alice",
                ts=2,
                merge_parent="b1",
                merge=MergeDetails(summary("alice", 0), summary("bob", 1)),
            ),
        ]
        ops = structural(reconstruct(records))
        assert not any(isinstance(op, Merge) for op in ops)
        assert ops[-1].root_id == rid("m")
        assert ops[-1].branch == BranchHandle("alice", 0)


class TestBookkeeping:
    def test_summary_commits_not_duplicated(self):
        records = [
            record("g", ts=0),
            record("c1", "g", author="carol", ts=1),
            record(
                "m",
                "g",
                author=None,
                ts=2,
                merge_parent="c1",
                merge=MergeDetails(summary("alice", 0), summary("carol", 1)),
            ),
        ]
        ops = reconstruct(records)
        commits = [op for op in ops if isinstance(op, Commit)]
        assert [c.root_id for c in commits] == [rid("g"), rid("c1")]

    def test_retired_author_gets_fresh_branch(self):
        records = [
            record("g", ts=0),
            record("c1", "g", author="carol", ts=1),
            record(
                "m",
                "g",
                author=None,
                ts=2,
                merge_parent="c1",
                merge=MergeDetails(summary("alice", 0), summary("carol", 1)),
            ),
            record("c2", "m", author="carol", ts=3),
        ]
        ops = reconstruct(records)
        creates = [op for op in ops if isinstance(op, CreateBranch)]
        assert [c.handle for c in creates] == [
            BranchHandle("alice", 0),
            BranchHandle("carol", 1),
            BranchHandle("carol", 2),
        ]
        assert creates[2].base == BranchHandle("alice", 0)
        assert ops[-1].branch == BranchHandle("carol", 2)

    def test_root_ids_unique_per_branch(self):
        records = [
            record("g", ts=0),
            record("b1", "g", author="bob", ts=1),
            record("c1", "g", author="carol", ts=2),
            record(
                "m1",
                "g",
                author=None,
                ts=3,
                merge_parent="b1",
                merge=MergeDetails(summary("alice", 0), summary("bob", 1)),
            ),
            record(
                "m2",
                "m1",
                author=None,
                ts=4,
                merge_parent="c1",
                merge=MergeDetails(summary("alice", 3), summary("carol", 2)),
            ),
        ]
        ops = reconstruct(records)
        seen = set()
        for op in ops:
            if isinstance(op, Commit):
                key = (op.branch.author, op.root_id)
            elif isinstance(op, Merge):
                key = (op.target.author, op.root_id)
            else:
                continue
            assert key not in seen
            seen.add(key)

    def test_branches_always_fork_from_root(self):
        records = [record("g", ts=0)] + [
            record(f"c{i}", "g", author=f"user{i}", ts=i) for i in range(1, 5)
        ]
        ops = reconstruct(records)
        root = BranchHandle("alice", 0)
        for op in ops[1:]:
            if isinstance(op, CreateBranch):
                assert op.base == root


    def test_authorless_merge_commits_unseen_sides_then_merges_once(self):
        records = [
            record("g", ts=0),
            record(
                "m",
                "p",
                author=None,
                ts=5,
                merge_parent="q",
                merge=MergeDetails(summary("alice", 1, "p"), summary("dave", 2, "q")),
            ),
        ]
        ops = reconstruct(records)[3:]
        assert kinds(structural(ops)) == [
            "Commit",
            "CreateBranch",
            "Commit",
            "Merge",
            "RetireBranch",
        ]
        assert ops[0].branch == BranchHandle("alice", 0)
        assert ops[0].root_id == rid("p")
        assert ops[2].root_id == rid("q")
        assert sum(isinstance(op, Merge) for op in ops) == 1
        assert sum(isinstance(op, RetireBranch) for op in ops) == 1
        assert ops[-1] == RetireBranch("dave", BranchHandle("dave", 1))


class TestDeterminism:
    def _log(self):
        return [
            record("g", ts=0, tags=["t"]),
            record("a1", "g", ts=1),
            record("b1", "g", author="bob", ts=2),
            record("b2", "b1", author="bob", ts=3, tags=["x"]),
            record(
                "m",
                "a1",
                author=None,
                ts=4,
                merge_parent="b2",
                merge=MergeDetails(summary("alice", 1), summary("bob", 3)),
            ),
            record("a2", "m", ts=5),
        ]

    def test_rerun_is_identical(self):
        log = self._log()
        assert reconstruct(log) == reconstruct(log)

    def test_input_order_does_not_matter(self):
        log = self._log()
        expected = reconstruct(log)
        shuffled = list(log)
        random.Random(7).shuffle(shuffled)
        assert reconstruct(shuffled) == expected
        assert reconstruct(reversed(log)) == expected

    def test_timestamp_ties_keep_input_order(self):
        first = [
            record("g", ts=0),
            record("x", "g", ts=1, comment="x"),
            record("y", "g", ts=1, comment="y"),
        ]
        ops = structural(reconstruct(first))
        assert [op.comment for op in ops[2:]] == ["x", "y"]
        second = [first[0], first[2], first[1]]
        ops = structural(reconstruct(second))
        assert [op.comment for op in ops[2:]] == ["y", "x"]

    def test_custom_order(self):
        log = [record("g", ts=0), record("a", "g", ts=2), record("b", "g", ts=1)]
        ops = structural(reconstruct(log, order=list))
        assert [op.root_id for op in ops[1:]] == [rid("g"), rid("a"), rid("b")]

    def test_does_not_mutate_input(self):
        log = self._log()
        before = list(log)
        reconstruct(log)
        assert log == before


class TestValidation:
    def test_empty_log(self):
        with pytest.raises(EmptyLog):
            reconstruct([])

    def test_empty_log_is_ambiguous_genesis(self):
        with pytest.raises(AmbiguousGenesis):
            reconstruct([])

    def test_no_genesis(self):
        with pytest.raises(AmbiguousGenesis, match="found 0"):
            reconstruct([record("a", "g", ts=1)])

    def test_two_genesis_records(self):
        with pytest.raises(AmbiguousGenesis) as exc_info:
            reconstruct([record("g1"), record("g2", author="bob")])
        assert set(exc_info.value.roots) == {rid("g1"), rid("g2")}

    def test_duplicate_root(self):
        with pytest.raises(DuplicateRootIdentifier) as exc_info:
            reconstruct([record("g"), record("a", "g"), record("a", "g", ts=1)])
        assert exc_info.value.root == rid("a")

    def test_no_author_no_merge(self):
        with pytest.raises(MalformedRecord) as exc_info:
            reconstruct([record("g"), record("x", "g", author=None, ts=1)])
        assert exc_info.value.root == rid("x")

    def test_merge_parent_without_details(self):
        with pytest.raises(MalformedRecord, match="together"):
            reconstruct([record("g"), record("m", "g", ts=1, merge_parent="g")])

    def test_merge_details_without_merge_parent(self):
        merge = MergeDetails(summary("alice", 0), summary("bob", 0))
        with pytest.raises(MalformedRecord, match="together"):
            reconstruct([record("g"), record("m", "g", ts=1, merge=merge)])

    def test_authorless_merge_without_other_side(self):
        merge = MergeDetails(summary("alice", 0), summary("alice", 0))
        bad = record("m", "g", author=None, ts=1, merge_parent="g", merge=merge)
        with pytest.raises(MalformedRecord, match="no side off the root"):
            reconstruct([record("g"), bad])

    def test_authorless_merge_summary_without_author(self):
        merge = MergeDetails(summary("alice", 0), summary(None, 0))
        bad = record("m", "g", author=None, ts=1, merge_parent="g", merge=merge)
        with pytest.raises(MalformedRecord, match="summary has no author"):
            reconstruct([record("g"), bad])

    def test_malformed_record_documents_merge_side_cases(self):
        doc = MalformedRecord.__doc__
        assert "authorless merge" in doc
        assert "root author" in doc

    def test_genesis_without_author(self):
        with pytest.raises(MalformedRecord, match="genesis"):
            reconstruct([record("g", author=None)])

    def test_rejects_before_emitting(self):
        # Malformed record sorts last; nothing is returned for the valid prefix
        records = [
            record("g"),
            record("a", "g", ts=1),
            record("x", "a", author=None, ts=99),
        ]
        ops = None
        with pytest.raises(MalformedRecord):
            ops = reconstruct(records)
        assert ops is None
