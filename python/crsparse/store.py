"""
Compressed row/column storage.

A CRStore holds one matrix in a compressed layout:

    offsets: (line_count + 1,) start of each primary line in indices/values,
             closed by a sentinel equal to nnz
    indices: (nnz,) secondary coordinate of each stored entry
    values:  (nnz,) stored values, parallel to indices

For CSR the primary coordinate is the row and the secondary the column; CSC
swaps them. A store only changes by having all three arrays replaced at once
(see the in-place mutators at the bottom of the class).
"""

from bisect import bisect_left
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import get_config, resolve_is_zero
from .entry import Entry, Layout
from .errors import IndexOutOfRange, InvariantError, ShapeMismatchError


# -------------------- helpers --------------------

def _as_index_array(seq) -> np.ndarray:
    return np.asarray(seq, dtype=get_config().index_dtype)


def _as_value_array(seq, dtype=None) -> np.ndarray:
    """Convert values to a 1D numpy array, falling back to object dtype."""
    n = len(seq)
    if dtype is None and n == 0:
        dtype = get_config().value_dtype
    if dtype is not None and np.dtype(dtype) == object:
        out = np.empty(n, dtype=object)
        out[:] = list(seq)
        return out
    arr = np.asarray(seq, dtype=dtype)
    if arr.ndim != 1:
        # values that numpy would broadcast into extra dimensions (tuples, ...)
        arr = np.empty(n, dtype=object)
        arr[:] = list(seq)
    return arr


class CRStore:
    """
    Compressed sparse matrix in CSR or CSC layout.

    Build one with ``CRStore.from_sorted_entries`` (or the helpers in
    ``crsparse.convert``); the constructor takes the raw arrays as-is and does
    not check them, use ``validate()`` for that.
    """

    def __init__(self, offsets=None, indices=None, values=None, layout=Layout.CSR, dtype=None):
        self.layout = Layout.coerce(layout)
        self.offsets = _as_index_array([0] if offsets is None else offsets)
        self.indices = _as_index_array([] if indices is None else indices)
        self.values = _as_value_array([] if values is None else values, dtype)

    @classmethod
    def from_sorted_entries(cls, entries: Iterable[Entry], layout=Layout.CSR,
                            dtype=None) -> "CRStore":
        """
        Compress entries already sorted by (primary, secondary) for ``layout``.

        Offsets are backfilled for every primary line skipped since the last
        entry, so empty lines become empty ranges. The input is neither
        re-sorted nor checked.

        Args:
            entries: Sorted entries with unique coordinates
            layout: Target layout
            dtype: Value dtype; inferred from the values when None

        Returns:
            New CRStore
        """
        layout = Layout.coerce(layout)
        row_major = layout is Layout.CSR

        offsets: List[int] = []
        indices: List[int] = []
        values: list = []
        for e in entries:
            primary, secondary = (e.row, e.column) if row_major else (e.column, e.row)
            while len(offsets) < primary + 1:
                offsets.append(len(indices))
            indices.append(secondary)
            values.append(e.value)
        offsets.append(len(indices))

        return cls(offsets, indices, values, layout, dtype=dtype)

    # -------------------- accessors --------------------

    @property
    def nnz(self) -> int:
        return len(self.indices)

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    def line_count(self) -> int:
        """Number of primary lines, i.e. highest populated primary coordinate + 1."""
        return len(self.offsets) - 1

    def line_range(self, i: int) -> Tuple[int, int]:
        """Return the half-open range [start, end) of line ``i`` in indices/values."""
        if not 0 <= i < self.line_count():
            raise IndexOutOfRange("line", i, self.line_count())
        return int(self.offsets[i]), int(self.offsets[i + 1])

    def line(self, i: int) -> Tuple[np.ndarray, np.ndarray]:
        """Return (indices, values) views for line ``i``."""
        start, end = self.line_range(i)
        return self.indices[start:end], self.values[start:end]

    def index_at(self, k: int) -> int:
        if not 0 <= k < self.nnz:
            raise IndexOutOfRange("element", k, self.nnz)
        return int(self.indices[k])

    def value_at(self, k: int):
        if not 0 <= k < self.nnz:
            raise IndexOutOfRange("element", k, self.nnz)
        return self.values[k]

    def get(self, row: int, column: int):
        """Read one cell; missing cells read as a zero of the value dtype."""
        primary, secondary = (row, column) if self.layout is Layout.CSR else (column, row)
        if 0 <= primary < self.line_count():
            start, end = self.line_range(primary)
            k = start + bisect_left(self.indices[start:end].tolist(), secondary)
            if k < end and self.indices[k] == secondary:
                return self.values[k]
        return self.values.dtype.type(0) if self.values.dtype != object else 0

    def extent(self) -> Tuple[int, int]:
        """Smallest (rows, columns) shape holding every stored coordinate."""
        secondary = int(self.indices.max()) + 1 if self.nnz else 0
        if self.layout is Layout.CSR:
            return self.line_count(), secondary
        return secondary, self.line_count()

    def decompress(self) -> List[Entry]:
        """Return every stored entry, in the store's sorted order."""
        entries = []
        indices = self.indices.tolist()
        values = self.values.tolist()
        row_major = self.layout is Layout.CSR
        for primary in range(self.line_count()):
            start, end = int(self.offsets[primary]), int(self.offsets[primary + 1])
            for k in range(start, end):
                if row_major:
                    entries.append(Entry(primary, indices[k], values[k]))
                else:
                    entries.append(Entry(indices[k], primary, values[k]))
        return entries

    def copy(self) -> "CRStore":
        return CRStore(self.offsets.copy(), self.indices.copy(), self.values.copy(), self.layout,
                       dtype=self.values.dtype)

    def to_dense(self, shape: Optional[Sequence[int]] = None) -> np.ndarray:
        """
        Convert to a dense (rows, columns) numpy array.

        Args:
            shape: Output shape; defaults to ``extent()``

        Returns:
            Dense 2D numpy array with the store's value dtype
        """
        need = self.extent()
        if shape is None:
            shape = need
        rows, cols = shape
        if rows < need[0] or cols < need[1]:
            raise ShapeMismatchError(f"shape {tuple(shape)} cannot hold stored extent {need}")
        dense = np.zeros((rows, cols), dtype=self.values.dtype)
        for i in range(self.line_count()):
            start, end = int(self.offsets[i]), int(self.offsets[i + 1])
            if end > start:
                if self.layout is Layout.CSR:
                    dense[i, self.indices[start:end]] = self.values[start:end]
                else:
                    dense[self.indices[start:end], i] = self.values[start:end]
        return dense

    def to_scipy(self, shape: Optional[Sequence[int]] = None):
        """Wrap the raw arrays in a scipy.sparse csr_matrix / csc_matrix."""
        import scipy.sparse as sp

        shape = tuple(self.extent() if shape is None else shape)
        cls = sp.csr_matrix if self.layout is Layout.CSR else sp.csc_matrix
        return cls((self.values.copy(), self.indices.copy(), self.offsets.copy()), shape=shape)

    def validate(self, check_zeros: bool = False, is_zero=None) -> None:
        """
        Check the structural invariants, raising InvariantError on the first
        violation. Never called implicitly.
        """
        if len(self.indices) != len(self.values):
            raise InvariantError(
                f"indices and values differ in length: {len(self.indices)} != {len(self.values)}")
        if len(self.offsets) == 0 or self.offsets[0] != 0:
            raise InvariantError("offsets must start at 0")
        if self.offsets[-1] != self.nnz:
            raise InvariantError(f"offsets sentinel {self.offsets[-1]} != nnz {self.nnz}")
        if np.any(np.diff(self.offsets) < 0):
            raise InvariantError("offsets must be non-decreasing")
        if self.nnz and self.indices.min() < 0:
            raise InvariantError("indices must be non-negative")
        for i in range(self.line_count()):
            start, end = int(self.offsets[i]), int(self.offsets[i + 1])
            if np.any(np.diff(self.indices[start:end]) <= 0):
                raise InvariantError(f"line {i} indices are not strictly increasing")
        if self.line_count() and self.offsets[-2] == self.offsets[-1]:
            raise InvariantError("trailing line is empty")
        if check_zeros:
            is_zero = resolve_is_zero(is_zero)
            for k, v in enumerate(self.values.tolist()):
                if is_zero(v):
                    raise InvariantError(f"explicit zero stored at position {k}")

    # -------------------- in-place mutators --------------------
    # Each rebuilds the whole structure and swaps it in.

    def _assign(self, other: "CRStore") -> None:
        self.layout = other.layout
        self.offsets = other.offsets
        self.indices = other.indices
        self.values = other.values

    def convert(self, layout) -> None:
        """Re-lay this store out in ``layout`` in place."""
        from . import convert
        self._assign(convert.to_layout(self, layout))

    def transpose(self) -> None:
        """Replace this store with its transpose, keeping the layout."""
        from . import convert
        self._assign(convert.transpose(self))

    def insert(self, row: int, column: int, value, duplicates: Optional[str] = None) -> None:
        from . import convert
        self._assign(convert.insert(self, row, column, value, duplicates=duplicates))

    def append(self, entries: Iterable[Entry], duplicates: Optional[str] = None) -> None:
        from . import convert
        self._assign(convert.append(self, entries, duplicates=duplicates))

    def fill(self, rows: int, columns: int, value) -> None:
        """Replace the whole content with a rows x columns fill (see convert.fill)."""
        from . import convert
        self._assign(convert.fill(rows, columns, value))

    # -------------------- operators --------------------

    def __add__(self, other: "CRStore") -> "CRStore":
        from .ops import add
        return add(self, other)

    def __matmul__(self, other: "CRStore") -> "CRStore":
        # converts self to CSR and other to CSC in place
        from .ops import multiply
        return multiply(self, other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CRStore):
            return NotImplemented
        return (self.layout is other.layout
                and np.array_equal(self.offsets, other.offsets)
                and np.array_equal(self.indices, other.indices)
                and np.array_equal(self.values, other.values))

    __hash__ = None

    def __repr__(self) -> str:
        return f"CRStore(layout={self.layout.value}, lines={self.line_count()}, nnz={self.nnz})"

    def __str__(self) -> str:
        rows, cols = self.extent()
        density = self.nnz / (rows * cols) if rows and cols else 0.0
        return (f"CRStore(layout={self.layout.value}, extent=({rows}, {cols}), "
                f"nnz={self.nnz}, density={density:.4f})")
