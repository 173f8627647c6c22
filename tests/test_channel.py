import threading
from types import SimpleNamespace

import pytest

from kthreads.channel import Channel
from kthreads.scheduler import Scheduler


class CoThread:
    """Cooperative thread: only the kernel's current thread runs."""

    def __init__(self, kernel, name, func=None, priority=4):
        self.kernel = kernel
        self.name = name
        self.priority = priority
        self.original_priority = priority
        self.done = False
        self.error = None
        self._go = threading.Event()
        if func is not None:
            worker = threading.Thread(target=self._body, args=(func,), daemon=True)
            worker.start()
            kernel.scheduler.ready_to_run(self)

    def _body(self, func):
        self._go.wait()
        self._go.clear()
        try:
            func()
        except BaseException as exc:
            self.error = exc
        self.done = True
        nxt = self.kernel.scheduler.find_next_to_run()
        self.kernel.current_thread = nxt
        nxt._go.set()

    def _switch(self, nxt):
        self.kernel.current_thread = nxt
        nxt._go.set()
        if not self._go.wait(5):
            raise RuntimeError("switch timed out")
        self._go.clear()

    def sleep(self):
        nxt = self.kernel.scheduler.find_next_to_run()
        if nxt is None:
            raise RuntimeError("deadlock")
        self._switch(nxt)

    def yield_cpu(self):
        self.kernel.scheduler.ready_to_run(self)
        nxt = self.kernel.scheduler.find_next_to_run()
        if nxt is not self:
            self._switch(nxt)

    def set_priority(self, new_priority):
        removed = self.kernel.scheduler.remove(self)
        self.priority = new_priority
        if removed:
            self.kernel.scheduler.ready_to_run(self)

    def restore_original_priority(self):
        self.priority = self.original_priority


def make_kernel():
    kernel = SimpleNamespace(scheduler=Scheduler(), current_thread=None)
    main = CoThread(kernel, "main")
    kernel.current_thread = main
    return kernel, main


def run_until_done(main, threads):
    for _ in range(10000):
        if all(t.done for t in threads):
            for t in threads:
                if t.error is not None:
                    raise t.error
            return
        main.yield_cpu()
    raise AssertionError("threads did not finish")


def test_name_is_kept():
    kernel, _ = make_kernel()
    assert Channel(kernel, "channelTest").name == "channelTest"


def test_messages_arrive_in_order():
    kernel, main = make_kernel()
    channel = Channel(kernel, "c")

    def transmitter():
        for i in range(5):
            channel.send(i)

    sender = CoThread(kernel, "Emisor", transmitter)
    received = [channel.receive() for _ in range(5)]
    run_until_done(main, [sender])
    assert received == list(range(5))


def test_receiver_started_first_still_gets_message():
    kernel, main = make_kernel()
    channel = Channel(kernel, "c")
    back = Channel(kernel, "back")

    relay = CoThread(kernel, "Receptor", lambda: back.send(channel.receive()))
    main.yield_cpu()
    channel.send("hello")
    assert back.receive() == "hello"
    run_until_done(main, [relay])


def test_two_senders_one_receiver_deliver_everything():
    kernel, main = make_kernel()
    channel = Channel(kernel, "c")
    first = [("a", i) for i in range(3)]
    second = [("b", i) for i in range(3)]

    def sender(messages):
        def body():
            for message in messages:
                channel.send(message)
        return body

    threads = [
        CoThread(kernel, "A", sender(first)),
        CoThread(kernel, "B", sender(second)),
    ]
    received = [channel.receive() for _ in range(len(first) + len(second))]
    run_until_done(main, threads)
    assert sorted(received) == sorted(first + second)
    assert [m for m in received if m[0] == "a"] == first
    assert [m for m in received if m[0] == "b"] == second


def test_receive_blocks_without_a_sender():
    kernel, _ = make_kernel()
    channel = Channel(kernel, "c")
    with pytest.raises(RuntimeError, match="deadlock"):
        channel.receive()