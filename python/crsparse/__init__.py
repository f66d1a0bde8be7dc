"""crsparse: compressed row/column sparse matrices with merge-join products."""

from .config import config_context, get_config, set_defaults
from .convert import (
    append,
    decompress,
    fill,
    from_dense,
    from_entries,
    from_sorted_entries,
    insert,
    prune,
    to_column_compressed,
    to_layout,
    to_row_compressed,
    transpose,
)
from .entry import Entry, Layout, build, coalesce, sort_for_layout
from .errors import (
    DuplicateEntryError,
    IndexOutOfRange,
    InvariantError,
    ShapeMismatchError,
    SparseError,
)
from .ops import add, dot_runs, multiply, multiply_pure
from .store import CRStore

CSR = Layout.CSR
CSC = Layout.CSC

__version__ = "0.1.0"
