"""
Pytest configuration and shared fixtures for crsparse tests.
"""

import os
import sys

import numpy as np
import pytest

# Add python/ to path so the tests run from a plain checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python'))

from crsparse import Layout, from_dense


@pytest.fixture
def dense_a():
    """The 3x4 matrix used throughout the scenarios."""
    return np.array([
        [0, 1, 2, 1],
        [2, 3, 0, 5],
        [1, 0, 4, 0],
    ], dtype=np.int64)


@pytest.fixture
def dense_b():
    """A 4x3 matrix that multiplies with dense_a."""
    return np.array([
        [0, 1, 2],
        [1, 4, 0],
        [0, 0, 1],
        [0, 3, 0],
    ], dtype=np.int64)


@pytest.fixture
def csr_a(dense_a):
    return from_dense(dense_a, Layout.CSR)


@pytest.fixture
def make_dense():
    """Factory for random integer matrices with a given density."""
    def _make(shape, density=0.3, seed=0, low=-5, high=6):
        rng = np.random.default_rng(seed)
        values = rng.integers(low, high, size=shape)
        mask = rng.random(shape) < density
        return np.where(mask, values, 0).astype(np.int64)
    return _make
