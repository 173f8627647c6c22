from dataclasses import dataclass

import pytest

from kthreads.scheduler import MAX_PRIORITY, Scheduler


@dataclass(eq=False)
class FakeThread:
    name: str
    priority: int = 4


def test_empty_scheduler_has_nothing_to_run():
    scheduler = Scheduler()
    assert scheduler.find_next_to_run() is None
    assert len(scheduler) == 0


def test_same_priority_is_fifo():
    scheduler = Scheduler()
    threads = [FakeThread(f"t{i}") for i in range(3)]
    for thread in threads:
        scheduler.ready_to_run(thread)
    assert [scheduler.find_next_to_run() for _ in threads] == threads
    assert scheduler.find_next_to_run() is None


def test_higher_priority_runs_first():
    scheduler = Scheduler()
    low = FakeThread("low", 1)
    mid = FakeThread("mid", 5)
    high = FakeThread("high", MAX_PRIORITY)
    for thread in (low, mid, high):
        scheduler.ready_to_run(thread)
    assert scheduler.find_next_to_run() is high
    assert scheduler.find_next_to_run() is mid
    assert scheduler.find_next_to_run() is low


def test_lowest_priority_zero_is_accepted():
    scheduler = Scheduler()
    thread = FakeThread("zero", 0)
    scheduler.ready_to_run(thread)
    assert scheduler.find_next_to_run() is thread


@pytest.mark.parametrize("priority", [-1, MAX_PRIORITY + 1])
def test_priority_out_of_range_is_rejected(priority):
    scheduler = Scheduler()
    with pytest.raises(ValueError):
        scheduler.ready_to_run(FakeThread("bad", priority))


def test_none_thread_is_rejected():
    scheduler = Scheduler()
    with pytest.raises(ValueError):
        scheduler.ready_to_run(None)
    with pytest.raises(ValueError):
        scheduler.remove(None)


def test_remove_takes_thread_off_the_queue():
    scheduler = Scheduler()
    a = FakeThread("a")
    b = FakeThread("b")
    scheduler.ready_to_run(a)
    scheduler.ready_to_run(b)
    assert scheduler.remove(a) is True
    assert a not in scheduler
    assert b in scheduler
    assert scheduler.find_next_to_run() is b
    assert scheduler.find_next_to_run() is None


def test_remove_of_absent_thread_reports_false():
    scheduler = Scheduler()
    assert scheduler.remove(FakeThread("ghost")) is False


def test_describe_lists_highest_priority_first():
    scheduler = Scheduler()
    scheduler.ready_to_run(FakeThread("low", 2))
    scheduler.ready_to_run(FakeThread("high", 8))
    scheduler.ready_to_run(FakeThread("high2", 8))
    assert scheduler.describe() == "Ready list contents:\nhigh, high2, low, "


def test_describe_empty():
    assert Scheduler().describe() == "Ready list contents:\n"


def test_iteration_matches_dispatch_order():
    scheduler = Scheduler()
    threads = [FakeThread(f"t{p}", p) for p in (3, 7, 0, 7, 5)]
    for thread in threads:
        scheduler.ready_to_run(thread)
    listed = list(scheduler)
    assert len(scheduler) == len(threads)
    dispatched = []
    while (thread := scheduler.find_next_to_run()) is not None:
        dispatched.append(thread)
    assert dispatched == listed