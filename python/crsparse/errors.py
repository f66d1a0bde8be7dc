"""
Exceptions raised by crsparse.

Every error is a caller precondition violation; nothing here is retried.
"""


class SparseError(Exception):
    """Base exception for all crsparse errors."""


class IndexOutOfRange(SparseError, IndexError):
    """A line index or flat element index is outside the stored range."""

    def __init__(self, kind: str, index: int, limit: int):
        self.kind = kind
        self.index = index
        self.limit = limit
        super().__init__(f"{kind} index {index} out of range [0, {limit})")


class ShapeMismatchError(SparseError, ValueError):
    """Sequences or shapes that must agree do not."""


class DuplicateEntryError(SparseError, ValueError):
    """Two entries share a (row, column) under the 'error' duplicate policy."""

    def __init__(self, row: int, column: int):
        self.row = row
        self.column = column
        super().__init__(f"duplicate entry at (row={row}, column={column})")


class InvariantError(SparseError, ValueError):
    """A compressed store failed its structural check."""
