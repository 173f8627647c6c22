"""Mesa-style condition variables bound to a lock."""

from __future__ import annotations

from typing import Any

from kthreads.lock import Lock
from kthreads.semaphore import Semaphore


class Condition:
    """A queue of threads waiting for a signal.

    Every operation must be made while holding the bound lock.  A woken
    thread reacquires the lock itself before ``wait`` returns.
    """

    def __init__(self, kernel: Any, name: str, lock: Lock) -> None:
        self.name = name
        self.lock = lock
        self._semaphore = Semaphore(kernel, name, 0)
        self._waiting = 0

    @property
    def waiters(self) -> int:
        """Number of threads waiting and not yet signalled."""
        return self._waiting

    def _require_lock(self, operation: str) -> None:
        if not self.lock.is_held_by_current_thread():
            raise RuntimeError(
                f"{operation} on condition {self.name!r} needs lock {self.lock.name!r}"
            )

    def wait(self) -> None:
        """Release the lock, wait for a signal, then reacquire the lock."""
        self._require_lock("wait")
        self._waiting += 1
        self.lock.release()
        self._semaphore.p()
        self.lock.acquire()

    def signal(self) -> None:
        """Wake one waiting thread, if any."""
        self._require_lock("signal")
        if self._waiting > 0:
            self._waiting -= 1
            self._semaphore.v()

    def broadcast(self) -> None:
        """Wake every waiting thread."""
        self._require_lock("broadcast")
        while self._waiting > 0:
            self._waiting -= 1
            self._semaphore.v()