"""Mutual-exclusion lock with priority inheritance."""

from __future__ import annotations

import logging
from typing import Any, Optional

from kthreads.semaphore import Semaphore

log = logging.getLogger(__name__)


class Lock:
    """A lock that only its holder may release.

    While a higher-priority thread waits for the lock, the holder runs with
    that higher priority; releasing the lock restores the holder's original
    priority.
    """

    def __init__(self, kernel: Any, name: str) -> None:
        self._kernel = kernel
        self.name = name
        self._semaphore = Semaphore(kernel, name, 1)
        self.owner: Optional[Any] = None

    def acquire(self) -> None:
        """Wait until the lock is free and take it."""
        current = self._kernel.current_thread
        log.debug("%s tries to acquire lock %s", current.name, self.name)
        if self.is_held_by_current_thread():
            raise RuntimeError(f"lock {self.name!r} is already held by {current.name!r}")
        owner = self.owner
        if owner is not None and current.priority > owner.priority:
            log.debug(
                "Raising priority of %s from %d to %d",
                owner.name,
                owner.priority,
                current.priority,
            )
            owner.set_priority(current.priority)
        self._semaphore.p()
        self.owner = self._kernel.current_thread

    def release(self) -> None:
        """Free the lock; only the holder may do this."""
        current = self._kernel.current_thread
        log.debug("%s tries to release lock %s", current.name, self.name)
        if not self.is_held_by_current_thread():
            raise RuntimeError(f"lock {self.name!r} is not held by {current.name!r}")
        self.owner.restore_original_priority()
        self.owner = None
        self._semaphore.v()

    def is_held_by_current_thread(self) -> bool:
        """Whether the running thread is the one holding the lock."""
        return self.owner is not None and self.owner is self._kernel.current_thread

    def __enter__(self) -> "Lock":
        self.acquire()
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()