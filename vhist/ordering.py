"""Record ordering for reconstruction."""

from typing import Callable, Iterable

from .records import VersionRecord

OrderFn = Callable[[Iterable[VersionRecord]], list[VersionRecord]]
"""Ordering function: records (any order) -> records in processing order."""


def by_timestamp(records: Iterable[VersionRecord]) -> list[VersionRecord]:
    """Sort ascending by ``details.timestamp``.

    Stable, so records sharing a timestamp keep their input order.
    Timestamps stand in for the parent/merge-parent precedence.
    """
    # TODO: replace with a topological sort over parent/merge_parent once
    # renderers are checked against causal ordering.
    return sorted(records, key=lambda r: r.details.timestamp)
