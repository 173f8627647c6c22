"""Ready queues for the thread dispatcher, one FIFO per priority level."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Iterator, List, Optional

log = logging.getLogger(__name__)

MAX_PRIORITY = 9
PRIORITY_LEVELS = MAX_PRIORITY + 1


class Scheduler:
    """Keeps track of threads that are ready to run but not running.

    Threads are chosen highest priority first; threads sharing a priority
    are served in the order they became ready.  A thread is any object with
    ``name`` and ``priority`` attributes.
    """

    def __init__(self) -> None:
        self._ready: List[Deque[Any]] = [deque() for _ in range(PRIORITY_LEVELS)]

    def _queue_for(self, thread: Any) -> Deque[Any]:
        if thread is None:
            raise ValueError("thread must not be None")
        priority = thread.priority
        if not 0 <= priority <= MAX_PRIORITY:
            raise ValueError(
                f"priority {priority} of thread {thread.name!r} is outside "
                f"0..{MAX_PRIORITY}"
            )
        return self._ready[priority]

    def ready_to_run(self, thread: Any) -> None:
        """Put ``thread`` at the end of the ready queue for its priority."""
        queue = self._queue_for(thread)
        log.debug("Putting thread %s on ready list", thread.name)
        queue.append(thread)

    def find_next_to_run(self) -> Optional[Any]:
        """Remove and return the next thread to run, or None if none is ready."""
        for priority in range(MAX_PRIORITY, -1, -1):
            queue = self._ready[priority]
            if queue:
                log.debug("Actual priority: %d", priority)
                return queue.popleft()
        return None

    def remove(self, thread: Any) -> bool:
        """Take ``thread`` off the ready queue of its current priority.

        Returns whether the thread was found there.
        """
        queue = self._queue_for(thread)
        log.debug("Removing thread %s from ready list", thread.name)
        try:
            queue.remove(thread)
        except ValueError:
            return False
        return True

    def describe(self) -> str:
        """Return the contents of the ready queues, highest priority first."""
        names = "".join(f"{thread.name}, " for thread in self)
        return f"Ready list contents:\n{names}"

    def __iter__(self) -> Iterator[Any]:
        for priority in range(MAX_PRIORITY, -1, -1):
            yield from self._ready[priority]

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._ready)

    def __contains__(self, thread: object) -> bool:
        return any(thread in queue for queue in self._ready)