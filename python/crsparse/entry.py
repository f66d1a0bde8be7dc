"""
Entry model: (row, column, value) triples and their ordering per layout.

Triples are the unit of input/output for every bulk operation. A compressed
store is built from a list of entries sorted by (primary, secondary), where
primary is the row for CSR and the column for CSC.
"""

from enum import Enum
from typing import Any, List, NamedTuple, Optional, Sequence

from .config import resolve_duplicates, resolve_is_zero
from .errors import DuplicateEntryError, ShapeMismatchError


class Layout(Enum):
    """Compressed storage layout."""
    CSR = "csr"
    CSC = "csc"

    @classmethod
    def coerce(cls, value) -> "Layout":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.lower())
        raise ValueError(f"expected a Layout or 'csr'/'csc', got {value!r}")


class Entry(NamedTuple):
    """One stored matrix cell."""
    row: int
    column: int
    value: Any

    def transposed(self) -> "Entry":
        return Entry(self.column, self.row, self.value)


def layout_key(layout: Layout):
    """Sort key ordering entries by (primary, secondary) for ``layout``."""
    if Layout.coerce(layout) is Layout.CSR:
        return lambda e: (e.row, e.column)
    return lambda e: (e.column, e.row)


def build(rows: Sequence[int], columns: Sequence[int], values: Sequence[Any]) -> List[Entry]:
    """
    Zip three equal-length sequences into a list of entries.

    Args:
        rows: Row coordinates
        columns: Column coordinates
        values: Values at those coordinates

    Returns:
        List of Entry, in input order (not sorted)
    """
    if not (len(rows) == len(columns) == len(values)):
        raise ShapeMismatchError(
            f"rows, columns and values must have equal length, "
            f"got {len(rows)}, {len(columns)}, {len(values)}"
        )
    return [Entry(int(r), int(c), v) for r, c, v in zip(rows, columns, values)]


def sort_for_layout(entries: List[Entry], layout) -> List[Entry]:
    """Sort ``entries`` in place by (primary, secondary) and return the same list."""
    entries.sort(key=layout_key(layout))
    return entries


def coalesce(entries: List[Entry], duplicates: Optional[str] = None,
             is_zero=None) -> List[Entry]:
    """
    Merge entries sharing a (row, column) pair.

    ``entries`` must already be sorted for either layout, so duplicates are
    adjacent. Entries whose (merged) value is zero are dropped.

    Args:
        entries: Sorted entries
        duplicates: "sum", "overwrite" (last supplied wins) or "error";
            defaults to the configured policy
        is_zero: Zero predicate; defaults to the configured one

    Returns:
        New list with unique coordinates
    """
    policy = resolve_duplicates(duplicates)
    is_zero = resolve_is_zero(is_zero)

    out: List[Entry] = []
    for e in entries:
        if out and out[-1].row == e.row and out[-1].column == e.column:
            if policy == "error":
                raise DuplicateEntryError(e.row, e.column)
            value = out[-1].value + e.value if policy == "sum" else e.value
            out[-1] = Entry(e.row, e.column, value)
        else:
            out.append(e)
    return [e for e in out if not is_zero(e.value)]
