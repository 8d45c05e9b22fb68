"""Capped FIFO history of broadcast envelopes."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

DEFAULT_CAPACITY = 100

T = TypeVar("T")


class HistoryBuffer(Generic[T]):
    """Keeps the newest ``capacity`` entries, evicting the oldest first.

    One instance per event category; instances never share storage.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self._entries: deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: T) -> None:
        """Store an entry; at capacity the oldest one is dropped first."""
        self._entries.append(entry)

    def snapshot(self) -> list[T]:
        """Point-in-time copy, oldest first. Later appends do not touch it."""
        return list(self._entries)

    def recent(self, n: int) -> list[T]:
        """The newest ``n`` entries, oldest first."""
        if n <= 0:
            return []
        entries = self.snapshot()
        return entries[-n:]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())
