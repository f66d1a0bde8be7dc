"""
Sparse-sparse arithmetic: merge-join multiplication and elementwise addition.

Both operate on the raw compressed arrays and return a freshly built CSR
store. Values only need ``+``, ``*`` and a zero test, so any semiring-like
value type stored in an object array works as well as numeric dtypes.
"""

import logging
from typing import List, Sequence

import numpy as np

from .config import resolve_is_zero
from .convert import to_layout, to_row_compressed
from .entry import Entry, Layout
from .store import CRStore

logger = logging.getLogger(__name__)


def _result_dtype(a: CRStore, b: CRStore) -> np.dtype:
    dtype = np.result_type(a.dtype, b.dtype)
    # sums and products are accumulated as Python ints, which narrow integer
    # storage cannot hold
    if dtype.kind in "iu" and dtype.itemsize < 8:
        dtype = np.promote_types(dtype, np.int64)
    return dtype


# -------------------- merge-join --------------------

def dot_runs(a_idx: Sequence[int], a_val: Sequence, a_start: int, a_end: int,
             b_idx: Sequence[int], b_val: Sequence, b_start: int, b_end: int):
    """
    Dot product of two sorted sparse runs by merge-intersection.

    ``a_idx[a_start:a_end]`` and ``b_idx[b_start:b_end]`` are strictly
    increasing coordinates in the same space. The cursor on the smaller
    coordinate advances; matching coordinates multiply-accumulate and advance
    both. The walk stops as soon as the coordinate the lagging cursor has to
    reach is past the last (largest) coordinate of its own run.

    Returns:
        The accumulated sum, or None when the runs share no coordinate.
    """
    if a_start >= a_end or b_start >= b_end:
        return None
    a_max = a_idx[a_end - 1]
    b_max = b_idx[b_end - 1]

    acc = None
    i, j = a_start, b_start
    while i < a_end and j < b_end:
        ka, kb = a_idx[i], b_idx[j]
        if ka == kb:
            prod = a_val[i] * b_val[j]
            acc = prod if acc is None else acc + prod
            i += 1
            j += 1
        elif ka < kb:
            if kb > a_max:
                break
            i += 1
        else:
            if ka > b_max:
                break
            j += 1
    return acc


def multiply(a: CRStore, b: CRStore, is_zero=None) -> CRStore:
    """
    Sparse matrix product ``a @ b`` as a CSR store.

    Side effect: ``a`` is converted to CSR and ``b`` to CSC in place (their
    mathematical value is unchanged). Use ``multiply_pure`` to keep the
    operands' layouts.

    Inner dimensions are not checked: only coordinates present in both
    operands contribute, so an undersized operand just yields a smaller
    result.

    Args:
        a: Left operand (m x k)
        b: Right operand (k x n)
        is_zero: Zero predicate for dropping cancelled products

    Returns:
        New CSR store holding the product
    """
    is_zero = resolve_is_zero(is_zero)
    a.convert(Layout.CSR)
    if b is a:
        b = to_layout(a, Layout.CSC)
    else:
        b.convert(Layout.CSC)

    logger.debug("multiply: %d rows (nnz=%d) x %d columns (nnz=%d)",
                 a.line_count(), a.nnz, b.line_count(), b.nnz)

    a_off, a_idx, a_val = a.offsets.tolist(), a.indices.tolist(), a.values.tolist()
    b_off, b_idx, b_val = b.offsets.tolist(), b.indices.tolist(), b.values.tolist()
    b_lines = [c for c in range(b.line_count()) if b_off[c] < b_off[c + 1]]

    entries: List[Entry] = []
    for r in range(a.line_count()):
        a_start, a_end = a_off[r], a_off[r + 1]
        if a_start == a_end:
            continue
        # ascending c keeps each output row sorted
        for c in b_lines:
            acc = dot_runs(a_idx, a_val, a_start, a_end, b_idx, b_val, b_off[c], b_off[c + 1])
            if acc is not None and not is_zero(acc):
                entries.append(Entry(r, c, acc))

    return CRStore.from_sorted_entries(entries, Layout.CSR, dtype=_result_dtype(a, b))


def multiply_pure(a: CRStore, b: CRStore, is_zero=None) -> CRStore:
    """Same as ``multiply`` but leaves both operands untouched."""
    return multiply(a.copy(), b.copy(), is_zero=is_zero)


# -------------------- elementwise add --------------------

def add(a: CRStore, b: CRStore) -> CRStore:
    """
    Elementwise sum of two matrices as a CSR store.

    Operands may have different line counts; missing lines count as zero.
    CSC operands are converted on a copy. Sums that cancel to zero are kept
    as stored entries; pass the result through ``convert.prune`` to drop them.
    """
    a = to_row_compressed(a)
    b = to_row_compressed(b)
    rows = max(a.line_count(), b.line_count())
    logger.debug("add: %d rows (nnz=%d + %d)", rows, a.nnz, b.nnz)

    out_indices = []
    out_values = []
    out_offsets = [0]
    for y in range(rows):
        row_data = {}
        if y < a.line_count():
            cols, vals = a.line(y)
            for col, val in zip(cols.tolist(), vals.tolist()):
                row_data[col] = val
        if y < b.line_count():
            cols, vals = b.line(y)
            for col, val in zip(cols.tolist(), vals.tolist()):
                row_data[col] = row_data[col] + val if col in row_data else val

        for col, val in sorted(row_data.items()):
            out_indices.append(col)
            out_values.append(val)
        out_offsets.append(len(out_indices))

    return CRStore(out_offsets, out_indices, out_values, Layout.CSR, dtype=_result_dtype(a, b))
