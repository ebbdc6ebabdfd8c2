"""Replay graph operations onto a rendering surface."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from .ops import (
    BranchHandle,
    Commit,
    CreateBranch,
    Merge,
    Operation,
    RetireBranch,
    Tag,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphSurface(Protocol):
    """Protocol for commit-graph renderers.

    ``create_branch`` returns the surface's own branch object, which is
    passed back to the other calls.
    """

    def create_branch(self, author: str, base: Any | None) -> Any: ...
    def commit(
        self,
        branch: Any,
        *,
        root_id: str,
        author: str | None,
        email: str | None,
        timestamp: str,
        comment: str,
        tags: tuple[str, ...],
    ) -> None: ...
    def tag(self, branch: Any, label: str) -> None: ...
    def merge(
        self,
        target: Any,
        source: Any,
        *,
        root_id: str,
        author: str | None,
        email: str | None,
        timestamp: str,
        comment: str,
    ) -> None: ...
    def retire_branch(self, branch: Any) -> None: ...


def replay(ops: Iterable[Operation], surface: GraphSurface) -> dict[BranchHandle, Any]:
    """Apply operations to ``surface`` in order.

    Returns the mapping from branch handles to surface branches that
    were still active at the end.

    Raises:
        ValueError: An operation names a handle that was never created
            or has been retired.
    """
    live: dict[BranchHandle, Any] = {}

    def resolve(handle: BranchHandle) -> Any:
        try:
            return live[handle]
        except KeyError:
            raise ValueError(
                f"Unknown or retired branch {handle.author!r} ({handle.serial})"
            ) from None

    for op in ops:
        if isinstance(op, CreateBranch):
            base = resolve(op.base) if op.base is not None else None
            live[op.handle] = surface.create_branch(op.author, base)
        elif isinstance(op, Commit):
            surface.commit(
                resolve(op.branch),
                root_id=op.root_id,
                author=op.author,
                email=op.email,
                timestamp=op.timestamp,
                comment=op.comment,
                tags=op.tags,
            )
        elif isinstance(op, Tag):
            surface.tag(resolve(op.branch), op.label)
        elif isinstance(op, Merge):
            surface.merge(
                resolve(op.target),
                resolve(op.source),
                root_id=op.root_id,
                author=op.author,
                email=op.email,
                timestamp=op.timestamp,
                comment=op.comment,
            )
        elif isinstance(op, RetireBranch):
            surface.retire_branch(resolve(op.handle))
            del live[op.handle]
        else:
            raise TypeError(f"Unknown operation: {op!r}")
    logger.debug("Replayed history, %d branches left active", len(live))
    return live


def signature(author: str | None, email: str | None) -> str:
    """Format ``author <email>`` as shown on commit bubbles."""
    return f"{author or 'unknown'} <{email or ''}>"


class TextSurface:
    """A plain-text surface: one line per graph event.

    Branches are numbered lanes in creation order; ``render()`` returns
    the accumulated text.
    """

    def __init__(self, *, hash_width: int = 12) -> None:
        self.hash_width = hash_width
        self.lines: list[str] = []
        self._lanes = 0

    def create_branch(self, author: str, base: Any | None) -> int:
        lane = self._lanes
        self._lanes += 1
        origin = f" from lane {base}" if base is not None else ""
        self.lines.append(f"[{lane}] branch {author}{origin}")
        return lane

    def commit(
        self,
        branch: int,
        *,
        root_id: str,
        author: str | None,
        email: str | None,
        timestamp: str,
        comment: str,
        tags: tuple[str, ...],
    ) -> None:
        self.lines.append(
            f"[{branch}] * {root_id[: self.hash_width]} {comment}"
            f" - {signature(author, email)} {timestamp}"
        )

    def tag(self, branch: int, label: str) -> None:
        self.lines.append(f"[{branch}]   tag {label}")

    def merge(
        self,
        target: int,
        source: int,
        *,
        root_id: str,
        author: str | None,
        email: str | None,
        timestamp: str,
        comment: str,
    ) -> None:
        self.lines.append(
            f"[{target}] M {root_id[: self.hash_width]} merge lane {source}:"
            f" {comment} - {signature(author, email)} {timestamp}"
        )

    def retire_branch(self, branch: int) -> None:
        self.lines.append(f"[{branch}] end")

    def render(self) -> str:
        return "\n".join(self.lines)
