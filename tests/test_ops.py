"""
Unit tests for merge-join multiplication and elementwise addition.
"""

from fractions import Fraction

import numpy as np
import pytest

from crsparse import (
    CRStore,
    Entry,
    Layout,
    add,
    dot_runs,
    from_dense,
    from_entries,
    multiply,
    multiply_pure,
    prune,
    to_column_compressed,
)


class TestDotRuns:

    def test_intersection(self):
        acc = dot_runs([1, 3, 5], [1, 2, 3], 0, 3, [0, 3, 5, 9], [4, 5, 6, 7], 0, 4)
        assert acc == 2 * 5 + 3 * 6

    def test_disjoint(self):
        assert dot_runs([0, 1, 2], [1, 1, 1], 0, 3, [5, 6], [1, 1], 0, 2) is None

    def test_empty_run(self):
        assert dot_runs([0], [1], 0, 0, [0], [1], 0, 1) is None

    def test_sub_ranges(self):
        idx = [0, 2, 1, 2]
        val = [1, 2, 3, 4]
        # line 0 = [0, 2], line 1 = [1, 2]
        assert dot_runs(idx, val, 0, 2, idx, val, 2, 4) == 2 * 4

    def test_early_exit_stops_on_exceeded_max(self):
        class Counting(list):
            reads = 0

            def __getitem__(self, k):
                Counting.reads += 1
                return list.__getitem__(self, k)

        a_idx = Counting(range(1000))
        b_idx = [2000]
        assert dot_runs(a_idx, [1] * 1000, 0, 1000, b_idx, [1], 0, 1) is None
        # reads a_max plus the first cursor position, not the whole run
        assert Counting.reads <= 3

    def test_early_exit_when_b_cursor_lags(self):
        class Counting(list):
            reads = 0

            def __getitem__(self, k):
                Counting.reads += 1
                return list.__getitem__(self, k)

        b_idx = Counting(range(1000))
        assert dot_runs([2000], [1], 0, 1, b_idx, [1] * 1000, 0, 1000) is None
        # reads b_max plus the first cursor position
        assert Counting.reads <= 3


class TestMultiply:

    def test_dense_reference(self, dense_a, dense_b):
        a = from_dense(dense_a)
        b = from_dense(dense_b)
        c = multiply(a, b)
        assert c.layout is Layout.CSR
        c.validate(check_zeros=True)
        np.testing.assert_array_equal(c.to_dense((3, 3)), dense_a @ dense_b)

    def test_matmul_operator(self, dense_a, dense_b):
        c = from_dense(dense_a) @ from_dense(dense_b)
        np.testing.assert_array_equal(c.to_dense((3, 3)), dense_a @ dense_b)

    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.parametrize("density", [0.1, 0.5, 1.0])
    def test_random(self, make_dense, seed, density):
        da = make_dense((7, 5), density=density, seed=seed)
        db = make_dense((5, 6), density=density, seed=seed + 100)
        c = multiply(from_dense(da), from_dense(db, Layout.CSC))
        c.validate(check_zeros=True)
        np.testing.assert_array_equal(c.to_dense((7, 6)), da @ db)

    def test_operands_converted_in_place(self, dense_a, dense_b):
        a = from_dense(dense_a, Layout.CSC)
        b = from_dense(dense_b, Layout.CSR)
        multiply(a, b)
        assert a.layout is Layout.CSR
        assert b.layout is Layout.CSC
        np.testing.assert_array_equal(a.to_dense(), dense_a)
        np.testing.assert_array_equal(b.to_dense(), dense_b)

    def test_pure_keeps_operands(self, dense_a, dense_b):
        a = from_dense(dense_a, Layout.CSC)
        b = from_dense(dense_b, Layout.CSR)
        a_before, b_before = a.copy(), b.copy()
        c = multiply_pure(a, b)
        assert a == a_before and b == b_before
        np.testing.assert_array_equal(c.to_dense((3, 3)), dense_a @ dense_b)

    def test_self_product(self, make_dense):
        dense = make_dense((5, 5), density=0.5, seed=7)
        m = from_dense(dense)
        c = multiply(m, m)
        assert m.layout is Layout.CSR
        np.testing.assert_array_equal(c.to_dense((5, 5)), dense @ dense)

    def test_cancellation_is_dropped(self):
        a = from_dense(np.array([[1, 1]]))
        b = from_dense(np.array([[1], [-1]]))
        c = multiply(a, b)
        assert c.nnz == 0
        assert c.line_count() == 0

    def test_custom_zero_predicate(self):
        a = from_dense(np.array([[0.1, 0.2, -0.3]]))
        b = from_dense(np.array([[1.0], [1.0], [1.0]]))
        assert multiply_pure(a, b).nnz == 1
        assert multiply_pure(a, b, is_zero=lambda v: abs(v) < 1e-12).nnz == 0

    def test_empty_operand(self, csr_a):
        c = multiply(csr_a, CRStore())
        assert c.nnz == 0

    def test_shape_mismatch_is_permissive(self, dense_a):
        # b only covers the first two rows of the inner dimension
        db = np.array([[1, 0], [0, 1]])
        c = multiply(from_dense(dense_a), from_dense(db))
        np.testing.assert_array_equal(c.to_dense((3, 2)), dense_a[:, :2] @ db)

    def test_generic_values(self):
        a = from_entries([Entry(0, 0, Fraction(1, 2)), Entry(0, 1, Fraction(1, 3))])
        b = from_entries([Entry(0, 0, Fraction(2)), Entry(1, 0, Fraction(3))])
        c = multiply(a, b)
        assert c.dtype == object
        assert c.decompress() == [Entry(0, 0, Fraction(2))]

    @pytest.mark.parametrize("dtype", [np.uint8, np.int8, np.int16])
    def test_narrow_integers_widen(self, dtype):
        d = np.array([[100, 50]], dtype=dtype)
        e = np.array([[2], [3]], dtype=dtype)
        c = multiply(from_dense(d), from_dense(e))
        assert c.dtype == np.int64
        np.testing.assert_array_equal(c.to_dense(), d.astype(np.int64) @ e.astype(np.int64))


class TestAdd:

    def test_dense_reference(self, dense_a, make_dense):
        other = make_dense((3, 4), density=0.5, seed=3)
        c = add(from_dense(dense_a), from_dense(other))
        np.testing.assert_array_equal(c.to_dense((3, 4)), dense_a + other)

    def test_plus_operator(self, csr_a, dense_a):
        c = csr_a + csr_a
        np.testing.assert_array_equal(c.to_dense(), 2 * dense_a)

    def test_different_line_counts(self):
        da = np.array([[1, 0], [0, 2], [3, 0]])
        db = np.array([[0, 5]])
        for a, b in ((da, db), (db, da)):
            c = add(from_dense(a), from_dense(b))
            assert c.line_count() == 3
            c.validate()
            np.testing.assert_array_equal(c.to_dense((3, 2)), da + np.pad(db, ((0, 2), (0, 0))))

    def test_zero_sums_are_kept(self):
        a = from_dense(np.array([[1, 2]]))
        b = from_dense(np.array([[-1, 0]]))
        c = add(a, b)
        assert c.nnz == 2
        assert c.decompress() == [Entry(0, 0, 0), Entry(0, 1, 2)]
        assert prune(c).decompress() == [Entry(0, 1, 2)]

    def test_csc_operands_untouched(self, dense_a):
        a = from_dense(dense_a, Layout.CSC)
        b = to_column_compressed(from_dense(dense_a))
        c = add(a, b)
        assert c.layout is Layout.CSR
        assert a.layout is Layout.CSC and b.layout is Layout.CSC
        np.testing.assert_array_equal(c.to_dense(), 2 * dense_a)

    def test_empty_operands(self, csr_a):
        assert add(CRStore(), CRStore()).nnz == 0
        np.testing.assert_array_equal(add(csr_a, CRStore()).to_dense(), csr_a.to_dense())

    def test_dtype_promotion(self, csr_a):
        other = from_dense(np.array([[0.5]]))
        c = add(csr_a, other)
        assert c.dtype == np.float64
        assert c.get(0, 0) == 0.5

    @pytest.mark.parametrize("dtype", [np.uint8, np.int8])
    def test_narrow_integers_widen(self, dtype):
        d = np.array([[100, 0], [0, 120]], dtype=dtype)
        c = add(from_dense(d), from_dense(d))
        assert c.dtype == np.int64
        np.testing.assert_array_equal(c.to_dense(), d.astype(np.int64) * 2)
