"""vhist error types."""


class HistoryError(Exception):
    """Base class for errors that reject a reconstruction run.

    Attributes:
        root: Encoded identifier of the offending record, if any.
    """

    def __init__(self, message: str, root: str | None = None) -> None:
        self.root = root
        super().__init__(message)


class MalformedRecord(HistoryError):
    """Raised when a record has no defined place in the branch topology.

    For example a non-genesis record with neither an author nor merge
    details, or a record with only one of merge parent and merge details.

    Also raised for an authorless merge that has no non-root side to
    merge and retire: a parent summary without an author, or both
    summaries by the root author. A genesis record without an author is
    rejected the same way.
    """


class AmbiguousGenesis(HistoryError):
    """Raised when the log does not have exactly one parentless record."""

    def __init__(self, message: str, roots: tuple[str, ...] = ()) -> None:
        self.roots = roots
        super().__init__(message)


class EmptyLog(AmbiguousGenesis):
    """Raised when there are no records at all."""

    def __init__(self) -> None:
        super().__init__("Version log is empty")


class DuplicateRootIdentifier(HistoryError):
    """Raised when two records share the same root identifier."""

    def __init__(self, root: str) -> None:
        super().__init__(f"Duplicate root identifier: {root}", root=root)
