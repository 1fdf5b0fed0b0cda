"""
Pulse - Priority Queue
Binary heap stored as a dense list, ordered by an injected comparator.

``higher_priority(a, b)`` returns True when ``a`` must be served before ``b``.
The default is natural ordering where greater values win. Exact ties are not
served FIFO; callers that need insertion order bias the priorities themselves.
"""

from __future__ import annotations

import operator
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class PriorityQueue(Generic[T]):
    def __init__(self, higher_priority: Callable[[T, T], bool] | None = None) -> None:
        self._heap: list[T] = []
        self._higher = higher_priority or operator.gt

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[T]:
        """Iterate in heap-array order (root first, not sorted)."""
        return iter(list(self._heap))

    def push(self, value: T) -> None:
        """Insert a value and sift it up while its parent has lower priority."""
        self._heap.append(value)
        pos = len(self._heap) - 1
        while pos > 0:
            parent = (pos - 1) // 2
            if not self._higher(self._heap[pos], self._heap[parent]):
                break
            self._swap(pos, parent)
            pos = parent

    def pop(self) -> T | None:
        """Remove and return the highest-priority value, None when empty."""
        if not self._heap:
            return None
        top = self._heap[0]
        self._swap(0, len(self._heap) - 1)
        self._heap.pop()
        self._sift_down(0)
        return top

    def top(self) -> T | None:
        """Return the highest-priority value without removing it."""
        return self._heap[0] if self._heap else None

    def contains(self, candidate: T, predicate: Callable[[T], bool] | None = None) -> bool:
        """
        True if any value matches ``predicate`` (default: equality with candidate).

        Walks the internal nodes and checks each one with its direct children,
        which covers every slot of the heap.
        """
        if not self._heap:
            return False
        match = predicate or (lambda item: item == candidate)
        size = len(self._heap)
        for index in range(max(1, size // 2)):
            for slot in (index, 2 * index + 1, 2 * index + 2):
                if slot < size and match(self._heap[slot]):
                    return True
        return False

    def to_list(self) -> list[T]:
        """Snapshot copy in heap-array order."""
        return list(self._heap)

    def size(self) -> int:
        return len(self._heap)

    def empty(self) -> bool:
        return not self._heap

    def clear(self) -> None:
        self._heap = []

    def _sift_down(self, index: int) -> None:
        size = len(self._heap)
        while True:
            left, right = 2 * index + 1, 2 * index + 2
            best = index
            if left < size and self._higher(self._heap[left], self._heap[best]):
                best = left
            if right < size and self._higher(self._heap[right], self._heap[best]):
                best = right
            if best == index:
                return
            self._swap(index, best)
            index = best

    def _swap(self, i: int, j: int) -> None:
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]
