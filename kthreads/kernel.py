"""The kernel's global state: running thread, ready queues and dispatching."""

from __future__ import annotations

import logging
from typing import Optional

from kthreads.scheduler import Scheduler
from kthreads.thread import Thread, ThreadStatus, context_switch

log = logging.getLogger(__name__)


class Kernel:
    """Holds the data structures every thread and primitive shares.

    On creation the calling host thread becomes the kernel thread named
    ``main``, already running.
    """

    def __init__(self) -> None:
        self.scheduler = Scheduler()
        self.thread_to_be_destroyed: Optional[Thread] = None
        self.current_thread: Optional[Thread] = None
        main = Thread(self, "main")
        main.status = ThreadStatus.RUNNING
        self.current_thread = main
        self._shut_down = False

    @property
    def is_shut_down(self) -> bool:
        """Whether ``shutdown`` has been called."""
        return self._shut_down

    def run(self, next_thread: Thread) -> None:
        """Dispatch the CPU to ``next_thread``.

        The running thread must already be marked ready or blocked.  Returns
        once some thread switches back to the caller.
        """
        if next_thread is None:
            raise ValueError("next_thread must not be None")
        if self._shut_down:
            raise RuntimeError("the kernel has been shut down")
        old = self.current_thread
        self.current_thread = next_thread
        next_thread.status = ThreadStatus.RUNNING
        log.debug('Switching from thread "%s" to thread "%s"', old.name, next_thread.name)
        context_switch(old, next_thread)
        log.debug('Now in thread "%s"', self.current_thread.name)
        if self.thread_to_be_destroyed is not None:
            log.debug('Deleting thread "%s"', self.thread_to_be_destroyed.name)
            self.thread_to_be_destroyed = None

    def shutdown(self) -> None:
        """Drop every thread and ready queue; the kernel cannot run again."""
        log.debug("Cleaning up...")
        self.scheduler = Scheduler()
        self.thread_to_be_destroyed = None
        self.current_thread = None
        self._shut_down = True