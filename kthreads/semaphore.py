"""Counting semaphore built on the kernel's sleep/ready primitives."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque

log = logging.getLogger(__name__)


class Semaphore:
    """A non-negative counter with the blocking operations ``p`` and ``v``.

    ``p`` waits until the value is positive and then decrements it; ``v``
    increments it and makes one waiting thread ready, if there is one.
    """

    def __init__(self, kernel: Any, name: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"semaphore {name!r} needs a non-negative value")
        self._kernel = kernel
        self.name = name
        self._value = value
        self._waiting: Deque[Any] = deque()

    @property
    def value(self) -> int:
        """Current value of the counter."""
        return self._value

    def p(self) -> None:
        """Wait until the value is positive, then consume one unit."""
        while self._value == 0:
            thread = self._kernel.current_thread
            log.debug("Thread %s waits on semaphore %s", thread.name, self.name)
            self._waiting.append(thread)
            thread.sleep()
        self._value -= 1

    def v(self) -> None:
        """Add one unit and wake the longest-waiting thread, if any."""
        if self._waiting:
            self._kernel.scheduler.ready_to_run(self._waiting.popleft())
        self._value += 1

    def __repr__(self) -> str:
        return f"Semaphore({self.name!r}, value={self._value})"