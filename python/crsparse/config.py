"""
Global defaults for crsparse.

Provides:
- The zero predicate used for pruning in multiply and fill
- The duplicate policy used by insert/append/from_entries
- Index and value dtypes for newly built stores
"""

from contextlib import contextmanager
from typing import Any, Callable, Optional

import numpy as np


DUPLICATE_POLICIES = ("sum", "overwrite", "error")


def _default_is_zero(value) -> bool:
    return value == 0


class _Config:
    """
    Global configuration singleton.

    Operations read these values only when the caller does not pass an
    explicit argument.
    """

    def __init__(self):
        self._is_zero: Callable[[Any], bool] = _default_is_zero
        self._duplicates = "sum"
        self._index_dtype = np.dtype(np.int64)
        self._value_dtype = np.dtype(np.float64)

    @property
    def is_zero(self) -> Callable[[Any], bool]:
        """Predicate deciding whether a value is the additive identity."""
        return self._is_zero

    @is_zero.setter
    def is_zero(self, func: Optional[Callable[[Any], bool]]):
        self._is_zero = _default_is_zero if func is None else func

    @property
    def duplicates(self) -> str:
        """Policy for entries sharing a (row, column): sum, overwrite or error."""
        return self._duplicates

    @duplicates.setter
    def duplicates(self, policy: str):
        if policy not in DUPLICATE_POLICIES:
            raise ValueError(f"duplicate policy must be one of {DUPLICATE_POLICIES}, got {policy!r}")
        self._duplicates = policy

    @property
    def index_dtype(self) -> np.dtype:
        return self._index_dtype

    @index_dtype.setter
    def index_dtype(self, dtype):
        dtype = np.dtype(dtype)
        if dtype.kind not in "iu":
            raise ValueError(f"index dtype must be an integer type, got {dtype}")
        self._index_dtype = dtype

    @property
    def value_dtype(self) -> np.dtype:
        """Dtype used when it cannot be inferred from the values (empty stores)."""
        return self._value_dtype

    @value_dtype.setter
    def value_dtype(self, dtype):
        self._value_dtype = np.dtype(dtype)

    def snapshot(self) -> dict:
        return {
            "is_zero": self._is_zero,
            "duplicates": self._duplicates,
            "index_dtype": self._index_dtype,
            "value_dtype": self._value_dtype,
        }


# Global config instance
_config = _Config()


def get_config() -> _Config:
    """Get global configuration instance."""
    return _config


def set_defaults(**kwargs) -> None:
    """
    Update one or more global defaults.

    Example:
        >>> crsparse.set_defaults(duplicates="overwrite", index_dtype="int32")
    """
    for name, value in kwargs.items():
        if name not in ("is_zero", "duplicates", "index_dtype", "value_dtype"):
            raise TypeError(f"unknown configuration option {name!r}")
        setattr(_config, name, value)


@contextmanager
def config_context(**kwargs):
    """Temporarily override defaults, restoring the previous values on exit."""
    saved = _config.snapshot()
    try:
        set_defaults(**kwargs)
        yield _config
    finally:
        for name, value in saved.items():
            setattr(_config, name, value)


def resolve_is_zero(is_zero: Optional[Callable[[Any], bool]]) -> Callable[[Any], bool]:
    return _config.is_zero if is_zero is None else is_zero


def resolve_duplicates(duplicates: Optional[str]) -> str:
    if duplicates is None:
        return _config.duplicates
    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError(f"duplicate policy must be one of {DUPLICATE_POLICIES}, got {duplicates!r}")
    return duplicates
