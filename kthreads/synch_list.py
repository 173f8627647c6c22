"""A list with mutual exclusion whose ``pop`` waits for an item."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque

from kthreads.condition import Condition
from kthreads.lock import Lock


class SynchList:
    """A FIFO list shared between threads.

    One thread at a time touches the list; ``pop`` on an empty list waits
    until another thread appends.
    """

    def __init__(self, kernel: Any) -> None:
        self._items: Deque[Any] = deque()
        self._lock = Lock(kernel, "list lock")
        self._list_empty = Condition(kernel, "list empty cond", self._lock)

    def append(self, item: Any) -> None:
        """Add ``item`` at the end and wake one waiting ``pop``."""
        with self._lock:
            self._items.append(item)
            self._list_empty.signal()

    def pop(self) -> Any:
        """Remove and return the first item, waiting while the list is empty."""
        with self._lock:
            while not self._items:
                self._list_empty.wait()
            return self._items.popleft()

    def apply(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on every item, front to back, under the lock."""
        if not callable(func):
            raise TypeError("func must be callable")
        with self._lock:
            for item in self._items:
                func(item)

    def __len__(self) -> int:
        return len(self._items)