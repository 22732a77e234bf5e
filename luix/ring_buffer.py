"""Fixed-size ring buffer that overwrites its oldest element when full."""

from __future__ import annotations

from collections import deque
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """A ring of ``capacity`` slots; one slot stays free, so it holds ``capacity - 1`` items."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: deque[T] = deque(maxlen=capacity - 1)

    def push(self, value: T) -> None:
        """Add a value, dropping the oldest one if the buffer is full."""
        self._items.append(value)

    def pop(self) -> Optional[T]:
        """Remove and return the oldest value, or None if empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)