"""
Layout conversion and structural mutation.

Every structural change goes through the same path: decompress the store to
entries, edit the entry list, sort it for the target layout and compress it
again. Each call costs O(nnz log nnz); nothing here is meant for
high-frequency incremental updates.

All functions return a new CRStore (or, for ``to_layout`` on a store already
in the target layout, the same object). The in-place counterparts live on
CRStore itself.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from .config import get_config, resolve_is_zero
from .entry import Entry, Layout, coalesce, sort_for_layout
from .store import CRStore

logger = logging.getLogger(__name__)


# -------------------- construction --------------------

def from_sorted_entries(entries: Iterable[Entry], layout=Layout.CSR, dtype=None) -> CRStore:
    """Compress pre-sorted, duplicate-free entries. See CRStore.from_sorted_entries."""
    return CRStore.from_sorted_entries(entries, layout, dtype=dtype)


def from_entries(entries: Iterable[Entry], layout=Layout.CSR, duplicates: Optional[str] = None,
                 is_zero=None, dtype=None) -> CRStore:
    """
    Build a store from entries in any order.

    Entries are sorted for ``layout``, duplicates are resolved with the
    ``duplicates`` policy and zero values are dropped.
    """
    layout = Layout.coerce(layout)
    entries = sort_for_layout(list(entries), layout)
    entries = coalesce(entries, duplicates=duplicates, is_zero=is_zero)
    return CRStore.from_sorted_entries(entries, layout, dtype=dtype)


def from_dense(arr: np.ndarray, layout=Layout.CSR, is_zero=None) -> CRStore:
    """
    Compress a dense 2D array.

    Args:
        arr: 2D array-like
        layout: Target layout
        is_zero: Zero predicate; numpy's non-zero test is used when None

    Returns:
        New CRStore with the array's dtype
    """
    arr = np.asarray(arr)
    if arr.ndim != 2:
        raise ValueError(f"from_dense expects a 2D array, got {arr.ndim}D")
    layout = Layout.coerce(layout)

    if is_zero is None:
        rows, cols = np.nonzero(arr)
        entries = [Entry(int(r), int(c), v) for r, c, v in zip(rows, cols, arr[rows, cols].tolist())]
    else:
        entries = [Entry(r, c, arr[r, c]) for r in range(arr.shape[0]) for c in range(arr.shape[1])
                   if not is_zero(arr[r, c])]
    # np.nonzero is row-major, which is already CSR order
    if layout is Layout.CSC:
        sort_for_layout(entries, layout)
    return CRStore.from_sorted_entries(entries, layout, dtype=arr.dtype)


def fill(rows: int, columns: int, value, is_zero=None) -> CRStore:
    """
    A rows x columns matrix with every cell equal to ``value``.

    A zero ``value`` gives the empty store. Otherwise the result is fully
    dense and always CSR; convert it afterwards if CSC is wanted.
    """
    is_zero = resolve_is_zero(is_zero)
    if is_zero(value) or rows <= 0 or columns <= 0:
        return CRStore(layout=Layout.CSR)

    total = rows * columns
    values = np.full(total, value)
    if values.dtype == object or values.ndim != 1:
        values = np.empty(total, dtype=object)
        values[:] = [value] * total
    index_dtype = get_config().index_dtype
    return CRStore(
        np.arange(0, total + 1, columns, dtype=index_dtype),
        np.tile(np.arange(columns, dtype=index_dtype), rows),
        values,
        Layout.CSR,
    )


# -------------------- conversion --------------------

def decompress(store: CRStore) -> List[Entry]:
    return store.decompress()


def _rebuild(entries: List[Entry], layout: Layout, dtype) -> CRStore:
    sort_for_layout(entries, layout)
    return CRStore.from_sorted_entries(entries, layout, dtype=dtype)


def to_layout(store: CRStore, target) -> CRStore:
    """
    Return ``store`` in ``target`` layout.

    The same object is returned when it is already in ``target``; otherwise
    a new store is built from the re-sorted entries.
    """
    target = Layout.coerce(target)
    if store.layout is target:
        return store
    logger.debug("converting %s -> %s (nnz=%d)", store.layout.value, target.value, store.nnz)
    return _rebuild(store.decompress(), target, store.dtype)


def to_row_compressed(store: CRStore) -> CRStore:
    return to_layout(store, Layout.CSR)


def to_column_compressed(store: CRStore) -> CRStore:
    return to_layout(store, Layout.CSC)


def transpose(store: CRStore) -> CRStore:
    """
    Transpose, keeping the layout: a CSR input gives the transpose as CSR.
    """
    logger.debug("transposing %s store (nnz=%d)", store.layout.value, store.nnz)
    entries = [e.transposed() for e in store.decompress()]
    return _rebuild(entries, store.layout, store.dtype)


# -------------------- mutation --------------------

def append(store: CRStore, entries: Iterable[Entry], duplicates: Optional[str] = None,
           is_zero=None) -> CRStore:
    """
    Add entries to a store.

    Entries landing on an occupied cell are resolved with ``duplicates``
    ("sum" by default, see crsparse.config). Cells whose value ends up zero
    are removed.
    """
    new = [e if isinstance(e, Entry) else Entry(*e) for e in entries]
    logger.debug("appending %d entries to %s store (nnz=%d)", len(new), store.layout.value, store.nnz)
    combined = sort_for_layout(store.decompress() + new, store.layout)
    combined = coalesce(combined, duplicates=duplicates, is_zero=is_zero)
    dtype = np.result_type(store.dtype, _as_dtype([e.value for e in new]))
    return CRStore.from_sorted_entries(combined, store.layout, dtype=dtype)


def insert(store: CRStore, row: int, column: int, value, duplicates: Optional[str] = None,
           is_zero=None) -> CRStore:
    return append(store, [Entry(int(row), int(column), value)], duplicates=duplicates, is_zero=is_zero)


def prune(store: CRStore, is_zero=None) -> CRStore:
    """
    Return a copy without explicitly stored zeros.

    Trailing lines left empty are dropped so the line count stays equal to
    the highest populated line + 1.
    """
    is_zero = resolve_is_zero(is_zero)
    keep = np.array([not is_zero(v) for v in store.values.tolist()], dtype=bool)
    kept_before = np.concatenate([[0], np.cumsum(keep)])
    offsets = kept_before[store.offsets]

    lines = len(offsets) - 1
    while lines > 0 and offsets[lines - 1] == offsets[lines]:
        lines -= 1
    return CRStore(offsets[:lines + 1], store.indices[keep], store.values[keep], store.layout,
                   dtype=store.dtype)


def _as_dtype(values) -> np.dtype:
    if not values:
        return get_config().value_dtype
    try:
        arr = np.asarray(values)
    except (TypeError, ValueError):
        return np.dtype(object)
    return arr.dtype if arr.ndim == 1 else np.dtype(object)
