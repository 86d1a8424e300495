"""
Tests for the max-heap priority queue.
"""

import numpy as np

from netcluster.algorithms.fast_newman import MergeCandidate
from netcluster.algorithms.max_heap import MaxHeap


def test_empty_heap():
    """Extracting from an empty heap signals empty with None."""
    heap = MaxHeap()
    assert heap.size() == 0
    assert len(heap) == 0
    assert heap.extract_max() is None
    assert heap.peek() is None


def test_extracts_in_descending_order():
    """Items come out largest-gain first."""
    rng = np.random.default_rng(0)
    values = rng.standard_normal(50).tolist()
    heap = MaxHeap()
    for i, v in enumerate(values):
        heap.insert(MergeCandidate(delta_q=v, comm_a=i, comm_b=i + 1))

    assert heap.size() == 50
    out = []
    while heap.size() > 0:
        out.append(heap.extract_max().delta_q)
    assert out == sorted(values, reverse=True)


def test_peek_does_not_remove():
    heap = MaxHeap()
    heap.insert(MergeCandidate(0.1, 0, 1))
    heap.insert(MergeCandidate(0.7, 1, 2))
    assert heap.peek().delta_q == 0.7
    assert heap.size() == 2


def test_custom_key_attribute():
    """The ordering attribute is configurable."""

    class Item:
        def __init__(self, score):
            self.score = score

    heap = MaxHeap(key="score")
    for s in [3, 9, 1, 5]:
        heap.insert(Item(s))
    assert [heap.extract_max().score for _ in range(4)] == [9, 5, 3, 1]


def test_duplicates_are_kept():
    """The heap does no deduplication; identical entries all come back."""
    heap = MaxHeap()
    for _ in range(3):
        heap.insert(MergeCandidate(0.5, 1, 2))
    assert heap.size() == 3
    popped = [heap.extract_max() for _ in range(3)]
    assert all(c.comm_a == 1 and c.comm_b == 2 for c in popped)
    assert heap.extract_max() is None


def test_equal_keys_all_returned():
    """Ties come back in some order; only the multiset is guaranteed."""
    heap = MaxHeap()
    for i in range(6):
        heap.insert(MergeCandidate(1.0, i, i + 10))
    pairs = {(c.comm_a, c.comm_b) for c in (heap.extract_max() for _ in range(6))}
    assert pairs == {(i, i + 10) for i in range(6)}
