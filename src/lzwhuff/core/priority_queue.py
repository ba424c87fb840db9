from __future__ import annotations

from collections.abc import Callable
from typing import Final, Generic, TypeVar

from lzwhuff.errors import EmptyQueue

T = TypeVar("T")

INITIAL_CAPACITY: Final[int] = 10


class PriorityQueue(Generic[T]):
    """
    Binary min-heap over a caller-supplied ordering.

    ``cmp(a, b)`` must return True when ``a`` strictly precedes ``b``.
    Ties are not stable: equal items come out in whatever order the heap
    produces, which is deterministic for a given insert/extract sequence.

    Array model: slots ``[0, size)`` are live, the rest is spare capacity
    (doubled when full).
    """

    def __init__(self, cmp: Callable[[T, T], bool]):
        self._cmp = cmp
        self._heap: list[T | None] = [None] * INITIAL_CAPACITY
        self._size = 0

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def __len__(self) -> int:
        return self._size

    def capacity(self) -> int:
        return len(self._heap)

    def items(self) -> list[T]:
        """Live items in heap (array) order."""
        return list(self._heap[: self._size])  # type: ignore[arg-type]

    def _swap(self, i: int, j: int) -> None:
        h = self._heap
        h[i], h[j] = h[j], h[i]

    def _sift_up(self, i: int) -> None:
        h = self._heap
        while i > 0:
            parent = (i - 1) // 2
            if not self._cmp(h[i], h[parent]):  # type: ignore[arg-type]
                break
            self._swap(i, parent)
            i = parent

    def _sift_down(self, i: int) -> None:
        h = self._heap
        n = self._size
        while True:
            left = 2 * i + 1
            right = left + 1
            smallest = i
            if left < n and self._cmp(h[left], h[smallest]):  # type: ignore[arg-type]
                smallest = left
            if right < n and self._cmp(h[right], h[smallest]):  # type: ignore[arg-type]
                smallest = right
            if smallest == i:
                return
            self._swap(i, smallest)
            i = smallest

    def insert(self, item: T) -> None:
        if self._size == len(self._heap):
            self._heap.extend([None] * len(self._heap))
        self._heap[self._size] = item
        self._sift_up(self._size)
        self._size += 1

    def peek(self) -> T:
        if self._size == 0:
            raise EmptyQueue("PriorityQueue is empty")
        return self._heap[0]  # type: ignore[return-value]

    def extract_min(self) -> T:
        if self._size == 0:
            raise EmptyQueue("PriorityQueue is empty")
        top = self._heap[0]
        self._size -= 1
        self._heap[0] = self._heap[self._size]
        self._heap[self._size] = None
        if self._size:
            self._sift_down(0)
        return top  # type: ignore[return-value]
