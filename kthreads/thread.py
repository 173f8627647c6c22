"""Kernel threads: creation, forking, yielding, sleeping, finishing and joining.

Only one thread runs at a time.  Each forked thread is carried by a host
operating-system thread, and control passes between them by handing over a
private baton.  Control therefore moves only at ``yield_cpu``, ``sleep`` and
``finish``, just as on a uniprocessor without preemption.

A thread works with a kernel object that provides:

* ``current_thread`` -- the thread holding the CPU;
* ``scheduler`` -- a :class:`kthreads.scheduler.Scheduler`;
* ``thread_to_be_destroyed`` -- the thread that has just finished;
* ``run(next_thread)`` -- make ``next_thread`` current, mark it running and
  call :func:`context_switch` from the old thread to it.

The thread that was running when the kernel started is never forked.  It is
the host thread: once no thread at all can run, whatever it is waiting on is
interrupted with :class:`Halted`, or with the error that a forked thread
raised.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional

from kthreads.channel import Channel
from kthreads.scheduler import MAX_PRIORITY

log = logging.getLogger(__name__)

DEFAULT_PRIORITY = 4


class ThreadStatus(enum.Enum):
    """Life-cycle state of a thread."""

    JUST_CREATED = "just created"
    RUNNING = "running"
    READY = "ready"
    BLOCKED = "blocked"


class Halted(Exception):
    """No thread is ready or runnable: the system has stopped."""


class _ThreadExit(BaseException):
    """Unwinds the carrier of a forked thread that will never run again."""


_parked_hosts: Dict[int, "Thread"] = {}
_parked_guard = threading.Lock()


def _check_priority(priority: int) -> None:
    if not 0 <= priority <= MAX_PRIORITY:
        raise ValueError(f"priority {priority} is outside 0..{MAX_PRIORITY}")


def _halt(kernel: Any, error: Optional[BaseException]) -> None:
    """Stop the system by waking the parked host thread with ``error``."""
    with _parked_guard:
        host = _parked_hosts.pop(id(kernel), None)
    if host is None:
        log.error("No host thread to hand control back to")
        return
    log.debug("No threads ready or runnable; halting")
    kernel.current_thread = host
    host.status = ThreadStatus.RUNNING
    host._halt_error = error
    host._halted = True
    host._baton.release()


def context_switch(old: "Thread", new: "Thread") -> None:
    """Give the CPU from ``old`` to ``new``.

    Returns in ``old`` once some thread switches back to it.  A finishing
    forked thread never returns from here.
    """
    if old is new:
        return
    kernel = old._kernel
    if not old.forked:
        with _parked_guard:
            _parked_hosts[id(kernel)] = old
    new._baton.release()
    if old._finishing and old.forked:
        raise _ThreadExit()
    old._baton.acquire()
    if not old.forked:
        with _parked_guard:
            if _parked_hosts.get(id(kernel)) is old:
                del _parked_hosts[id(kernel)]
    if old._halted:
        old._halted = False
        error, old._halt_error = old._halt_error, None
        if error is not None:
            raise error
        raise Halted("No threads ready or runnable")


class Thread:
    """A thread control block.

    ``joinable`` threads deliver their exit status to one ``join`` call.
    Priorities go from 0 to 9; higher ones are scheduled first.
    """

    def __init__(
        self,
        kernel: Any,
        name: str,
        joinable: bool = False,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        _check_priority(priority)
        self._kernel = kernel
        self.name = name
        self.joinable = joinable
        self.status = ThreadStatus.JUST_CREATED
        self.exit_status: Optional[int] = None
        self._priority = priority
        self._original_priority = priority
        self._finished_channel = (
            Channel(kernel, "threadFinalizedThread") if joinable else None
        )
        self._baton = threading.Semaphore(0)
        self._carrier: Optional[threading.Thread] = None
        self._func: Optional[Callable[[Any], Any]] = None
        self._arg: Any = None
        self._finishing = False
        self._halted = False
        self._halt_error: Optional[BaseException] = None

    @property
    def priority(self) -> int:
        """Priority the scheduler uses now."""
        return self._priority

    @property
    def original_priority(self) -> int:
        """Priority the thread was created with."""
        return self._original_priority

    @property
    def forked(self) -> bool:
        """Whether ``fork`` has been called on this thread."""
        return self._carrier is not None

    def _require_current(self, action: str) -> None:
        if self._kernel.current_thread is not self:
            raise RuntimeError(f"thread {self.name!r} must be running to {action}")

    def fork(self, func: Callable[[Any], Any], arg: Any = None) -> None:
        """Make the thread run ``func(arg)`` concurrently with the caller."""
        if not callable(func):
            raise TypeError("func must be callable")
        if self.forked:
            raise RuntimeError(f"thread {self.name!r} was already forked")
        log.debug("Forking thread %r with func=%r, arg=%r", self.name, func, arg)
        self._func = func
        self._arg = arg
        self._carrier = threading.Thread(
            target=self._carry, name=f"kthread-{self.name}", daemon=True
        )
        self._carrier.start()
        self.status = ThreadStatus.READY
        self._kernel.scheduler.ready_to_run(self)

    def _carry(self) -> None:
        self._baton.acquire()
        try:
            self._func(self._arg)
            self.finish(0)
        except _ThreadExit:
            return
        except BaseException as exc:
            _halt(self._kernel, exc)

    def join(self) -> int:
        """Wait for the thread to finish and return its exit status."""
        if not self.joinable:
            raise RuntimeError(f"thread {self.name!r} is not joinable")
        if self._kernel.current_thread is self:
            raise RuntimeError(f"thread {self.name!r} cannot join itself")
        log.debug(
            "Waiting for thread %s from thread %s",
            self.name,
            self._kernel.current_thread.name,
        )
        status = self._finished_channel.receive()
        log.debug("Thread %s joined", self.name)
        return status

    def yield_cpu(self) -> None:
        """Let another ready thread run, if there is one."""
        self._require_current("yield")
        log.debug("Yielding thread %r", self.name)
        scheduler = self._kernel.scheduler
        self.status = ThreadStatus.READY
        scheduler.ready_to_run(self)
        next_thread = scheduler.find_next_to_run()
        if next_thread is not None:
            self._kernel.run(next_thread)

    def sleep(self) -> None:
        """Block until another thread makes this one ready again."""
        self._require_current("sleep")
        log.debug("Sleeping thread %r", self.name)
        self.status = ThreadStatus.BLOCKED
        next_thread = self._kernel.scheduler.find_next_to_run()
        if next_thread is None:
            if self.forked:
                _halt(self._kernel, None)
                raise _ThreadExit()
            raise Halted("No threads ready or runnable")
        self._kernel.run(next_thread)

    def finish(self, status: int = 0) -> None:
        """End the thread, handing ``status`` to a joiner if joinable."""
        self._require_current("finish")
        log.debug("Finished with status: %d", status)
        self.exit_status = status
        if self._finished_channel is not None:
            self._finished_channel.send(status)
        log.debug("Finishing thread %r", self.name)
        self._finishing = True
        self._kernel.thread_to_be_destroyed = self
        self.sleep()

    def set_priority(self, new_priority: int) -> None:
        """Change the priority of a thread that is not running."""
        if self._kernel.current_thread is self:
            raise RuntimeError("the running thread cannot change its own priority")
        _check_priority(new_priority)
        scheduler = self._kernel.scheduler
        was_ready = scheduler.remove(self)
        log.debug(
            "Priority of %s changes from %d to %d",
            self.name,
            self._priority,
            new_priority,
        )
        self._priority = new_priority
        if was_ready:
            scheduler.ready_to_run(self)

    def restore_original_priority(self) -> None:
        """Go back to the priority the thread was created with."""
        self._priority = self._original_priority

    def __repr__(self) -> str:
        return (
            f"Thread({self.name!r}, priority={self._priority}, "
            f"status={self.status.name})"
        )