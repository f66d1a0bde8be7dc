"""
Example usage of crsparse
Demonstrates construction, conversion, arithmetic and incremental updates
"""

import numpy as np
import sys
import os

# Add parent directory to path to import from crsparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python'))

from crsparse import (
    Entry,
    Layout,
    add,
    build,
    fill,
    from_dense,
    from_sorted_entries,
    multiply,
    sort_for_layout,
    transpose,
)


def example_basic_creation():
    """Example 1: Creating compressed stores"""
    print("=" * 60)
    print("Example 1: Creating Compressed Stores")
    print("=" * 60)

    # Method 1: From triplets, sorted for the target layout
    entries = build([2, 1, 0, 1, 0], [2, 1, 3, 3, 2], [4.0, 3.0, 1.0, 5.0, 2.0])
    store = from_sorted_entries(sort_for_layout(entries, Layout.CSR), Layout.CSR)
    print(f"\nCreated from triplets: {store}")
    print(f"offsets={store.offsets.tolist()} indices={store.indices.tolist()}")
    print("Dense representation:")
    print(store.to_dense())

    # Method 2: From dense array, column-compressed
    dense = np.array([
        [0, 1, 2, 1],
        [2, 3, 0, 5],
        [1, 0, 4, 0],
    ])
    csc = from_dense(dense, Layout.CSC)
    print(f"\nCreated from dense: {csc}")
    print(f"offsets={csc.offsets.tolist()} indices={csc.indices.tolist()}")

    # Method 3: Constant fill
    print(f"\nfill(3, 4, 2.0): {fill(3, 4, 2.0)}")
    print(f"fill(3, 4, 0):   {fill(3, 4, 0)}")


def example_arithmetic():
    """Example 2: Addition, multiplication and transpose"""
    print("\n" + "=" * 60)
    print("Example 2: Arithmetic")
    print("=" * 60)

    dense_a = np.array([
        [0, 1, 2, 1],
        [2, 3, 0, 5],
        [1, 0, 4, 0],
    ])
    dense_b = np.array([
        [0, 1, 2],
        [1, 4, 0],
        [0, 0, 1],
        [0, 3, 0],
    ])
    a = from_dense(dense_a)
    b = from_dense(dense_b)

    print("\nA + A:")
    print(add(a, a).to_dense())

    # b is converted to CSC in place by the multiply
    product = multiply(a, b)
    print(f"\nA @ B (b is now {b.layout.value}):")
    print(product.to_dense((3, 3)))
    print("\nVerification (should match):")
    print(dense_a @ dense_b)

    print("\nA^T:")
    print(transpose(a).to_dense())


def example_incremental_updates():
    """Example 3: Insert and append"""
    print("\n" + "=" * 60)
    print("Example 3: Incremental Updates")
    print("=" * 60)

    store = from_dense(np.array([[1, 0], [0, 2]]))
    store.insert(0, 1, 7)
    store.append([Entry(2, 0, 3), Entry(1, 1, 1)])
    print(f"\nAfter insert/append: {store}")
    print(store.to_dense())


if __name__ == "__main__":
    example_basic_creation()
    example_arithmetic()
    example_incremental_updates()
