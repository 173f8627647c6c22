from types import SimpleNamespace

import pytest

from kthreads.lock import Lock
from kthreads.scheduler import Scheduler


class FakeThread:
    def __init__(self, name, priority=4, on_sleep=None):
        self.name = name
        self.priority = priority
        self.original_priority = priority
        self.on_sleep = on_sleep
        self.sleeps = 0

    def sleep(self):
        self.sleeps += 1
        if self.on_sleep is not None:
            self.on_sleep()

    def set_priority(self, new_priority):
        self.priority = new_priority

    def restore_original_priority(self):
        self.priority = self.original_priority


def make_kernel(thread):
    return SimpleNamespace(current_thread=thread, scheduler=Scheduler())


def test_acquire_and_release():
    main = FakeThread("main")
    kernel = make_kernel(main)
    lock = Lock(kernel, "l")
    assert lock.is_held_by_current_thread() is False
    lock.acquire()
    assert lock.is_held_by_current_thread() is True
    assert lock.owner is main
    lock.release()
    assert lock.is_held_by_current_thread() is False
    assert lock.owner is None


def test_acquire_twice_raises():
    kernel = make_kernel(FakeThread("main"))
    lock = Lock(kernel, "l")
    lock.acquire()
    with pytest.raises(RuntimeError):
        lock.acquire()


def test_release_without_holding_raises():
    kernel = make_kernel(FakeThread("main"))
    lock = Lock(kernel, "l")
    with pytest.raises(RuntimeError):
        lock.release()


def test_release_by_other_thread_raises():
    a = FakeThread("a")
    b = FakeThread("b")
    kernel = make_kernel(a)
    lock = Lock(kernel, "l")
    lock.acquire()
    kernel.current_thread = b
    with pytest.raises(RuntimeError):
        lock.release()
    kernel.current_thread = a
    assert lock.is_held_by_current_thread() is True


def test_context_manager_releases():
    kernel = make_kernel(FakeThread("main"))
    lock = Lock(kernel, "l")
    with lock as held:
        assert held is lock
        assert lock.is_held_by_current_thread() is True
    assert lock.owner is None


def test_context_manager_releases_on_error():
    kernel = make_kernel(FakeThread("main"))
    lock = Lock(kernel, "l")
    with pytest.raises(KeyError):
        with lock:
            raise KeyError("boom")
    assert lock.owner is None


def test_waiter_donates_priority_to_owner():
    observed = {}
    low = FakeThread("low", priority=2)
    kernel = make_kernel(low)
    lock = Lock(kernel, "l")

    def owner_runs_and_releases():
        observed["boosted"] = low.priority
        kernel.current_thread = low
        lock.release()
        observed["restored"] = low.priority
        kernel.current_thread = high

    high = FakeThread("high", priority=7, on_sleep=owner_runs_and_releases)

    lock.acquire()
    kernel.current_thread = high
    lock.acquire()

    assert observed["boosted"] == high.priority
    assert observed["restored"] == 2
    assert lock.owner is high
    assert high.sleeps == 1
    assert kernel.scheduler.find_next_to_run() is high


def test_lower_priority_waiter_does_not_lower_owner():
    high = FakeThread("high", priority=7)
    kernel = make_kernel(high)
    lock = Lock(kernel, "l")

    def owner_releases():
        kernel.current_thread = high
        assert high.priority == 7
        lock.release()
        kernel.current_thread = low

    low = FakeThread("low", priority=2, on_sleep=owner_releases)

    lock.acquire()
    kernel.current_thread = low
    lock.acquire()

    assert high.priority == 7
    assert lock.owner is low