import pytest

from kthreads.kernel import Kernel
from kthreads.thread import Halted, Thread, ThreadStatus


def test_new_kernel_runs_main_thread():
    kernel = Kernel()
    assert kernel.current_thread.name == "main"
    assert kernel.current_thread.status is ThreadStatus.RUNNING
    assert len(kernel.scheduler) == 0
    assert kernel.thread_to_be_destroyed is None


def test_forked_thread_runs_when_main_yields():
    kernel = Kernel()
    seen = []
    t = Thread(kernel, "worker")
    t.fork(seen.append, "ran")
    assert seen == []
    kernel.current_thread.yield_cpu()
    assert seen == ["ran"]
    assert t.exit_status == 0
    assert kernel.current_thread.name == "main"
    assert kernel.thread_to_be_destroyed is None


def test_higher_priority_runs_first():
    kernel = Kernel()
    order = []
    low = Thread(kernel, "low", priority=5)
    high = Thread(kernel, "high", priority=7)
    low.fork(order.append, "low")
    high.fork(order.append, "high")
    kernel.current_thread.yield_cpu()
    assert order == ["high", "low"]


def test_threads_interleave_on_yield():
    kernel = Kernel()
    order = []

    def body(name):
        for i in range(2):
            order.append((name, i))
            kernel.current_thread.yield_cpu()

    threads = [Thread(kernel, name) for name in ("a", "b")]
    for t in threads:
        t.fork(body, t.name)
    while len(order) < 4:
        kernel.current_thread.yield_cpu()
    assert order == [("a", 0), ("b", 0), ("a", 1), ("b", 1)]
    assert kernel.current_thread.name == "main"
    assert list(kernel.scheduler) == threads


def test_main_sleeping_with_nothing_ready_halts():
    kernel = Kernel()
    with pytest.raises(Halted):
        kernel.current_thread.sleep()


def test_error_in_forked_thread_reaches_main():
    kernel = Kernel()

    def boom(_):
        raise ValueError("bad")

    Thread(kernel, "boom").fork(boom, None)
    with pytest.raises(ValueError, match="bad"):
        kernel.current_thread.yield_cpu()
    assert kernel.current_thread.name == "main"


def test_run_rejects_none():
    kernel = Kernel()
    with pytest.raises(ValueError):
        kernel.run(None)


def test_shutdown_clears_state():
    kernel = Kernel()
    Thread(kernel, "pending").fork(lambda _: None, None)
    assert len(kernel.scheduler) == 1
    kernel.shutdown()
    assert kernel.is_shut_down
    assert kernel.current_thread is None
    assert len(kernel.scheduler) == 0
    with pytest.raises(RuntimeError):
        kernel.run(Thread(kernel, "late"))