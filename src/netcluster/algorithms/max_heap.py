"""
Binary max-heap keyed on a single real-valued attribute.

Used by the greedy modularity optimizer to hold merge candidates, but has no
knowledge of graphs: any object exposing the key attribute can be stored.
"""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class MaxHeap(Generic[T]):
    """
    Array-backed binary max-heap.

    Items are ordered by ``getattr(item, key)``. Ties between equal keys are
    resolved by whatever the heap layout happens to be at the time; the order
    in which equal-key items come out is not defined and must not be relied on.
    The heap performs no deduplication.

    Args:
        key: Name of the numeric attribute to order by (default ``"delta_q"``).
    """

    def __init__(self, key: str = "delta_q"):
        self._key = key
        self._heap: List[T] = []

    def size(self) -> int:
        """Number of items currently stored."""
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def insert(self, item: T) -> None:
        """Add *item* and restore heap order upward."""
        self._heap.append(item)
        self._bubble_up(len(self._heap) - 1)

    def extract_max(self) -> Optional[T]:
        """Remove and return the item with the largest key, or ``None`` if empty."""
        if not self._heap:
            return None
        self._swap(0, len(self._heap) - 1)
        top = self._heap.pop()
        self._bubble_down(0)
        return top

    def peek(self) -> Optional[T]:
        """Return the largest item without removing it, or ``None`` if empty."""
        return self._heap[0] if self._heap else None

    def _value(self, index: int) -> float:
        return getattr(self._heap[index], self._key)

    def _bubble_up(self, index: int) -> None:
        while index > 0:
            parent = (index - 1) // 2
            if self._value(index) <= self._value(parent):
                break
            self._swap(index, parent)
            index = parent

    def _bubble_down(self, index: int) -> None:
        length = len(self._heap)
        while True:
            left = 2 * index + 1
            right = left + 1
            largest = index

            if left < length and self._value(left) > self._value(largest):
                largest = left
            if right < length and self._value(right) > self._value(largest):
                largest = right
            if largest == index:
                break

            self._swap(index, largest)
            index = largest

    def _swap(self, i: int, j: int) -> None:
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]
