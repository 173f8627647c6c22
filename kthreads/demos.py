"""Demonstration workloads for the kernel's threads and synchronization.

Each demo runs on the thread currently holding the CPU of ``kernel``,
normally its ``main`` thread. It prints its progress to standard output
and returns a summary of what happened.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from kthreads.channel import Channel
from kthreads.condition import Condition
from kthreads.lock import Lock
from kthreads.semaphore import Semaphore
from kthreads.thread import Thread

log = logging.getLogger(__name__)

_ITERATIONS = 10
_SIMPLE_THREADS = 4
_NUM_TURNSTILES = 2
_ITERATIONS_PER_TURNSTILE = 50
_BUFFER_SIZE = 3
_EMPTY = _BUFFER_SIZE + 2
_ITEMS = 1000
_CHANNEL_MESSAGES = 5


def _yield(kernel: Any) -> None:
    kernel.current_thread.yield_cpu()


def run_simple(kernel: Any) -> List[str]:
    """Interleave four forked threads and ``main``, at most three at a time.

    Returns the names of the threads in the order they finished their work.
    """
    semaphore = Semaphore(kernel, "simpleTestSem", 3)
    done = [False] * _SIMPLE_THREADS
    finished: List[str] = []

    def simple_thread(_arg: Any) -> None:
        current = kernel.current_thread
        for num in range(_ITERATIONS):
            log.debug("Thread %s P", current.name)
            semaphore.p()
            print(f"*** Thread `{current.name}` is running: iteration {num}")
            current.yield_cpu()
            log.debug("Thread %s V", current.name)
            semaphore.v()
        if current.name != "main":
            done[int(current.name)] = True
        finished.append(current.name)
        print(f"!!! Thread `{current.name}` has finished SimpleThread")

    for i in range(_SIMPLE_THREADS):
        Thread(kernel, str(i)).fork(simple_thread)

    simple_thread(None)

    while True:
        all_done = all(done)
        _yield(kernel)
        if all_done:
            break

    print("Test finished")
    return finished


def _run_turnstiles(kernel: Any, turnstile: Callable[[int], None]) -> None:
    done = [False] * _NUM_TURNSTILES

    def body(n: int) -> None:
        turnstile(n)
        done[n] = True

    for i in range(_NUM_TURNSTILES):
        print(f"Launching turnstile {i}.")
        name = f"Turnstile {i}"
        print(f"Name: {name}")
        Thread(kernel, name).fork(body, i)

    for flag_index in range(_NUM_TURNSTILES):
        while not done[flag_index]:
            _yield(kernel)


def _report_garden(count: int) -> None:
    expected = _ITERATIONS_PER_TURNSTILE * _NUM_TURNSTILES
    print(
        f"All turnstiles finished. Final count is {count} "
        f"(should be {expected})."
    )


def run_garden(kernel: Any) -> int:
    """Ornamental garden: two turnstiles count visitors into one counter.

    Returns the final count.
    """
    count = 0

    def turnstile(n: int) -> None:
        nonlocal count
        for _ in range(_ITERATIONS_PER_TURNSTILE):
            _yield(kernel)
            temp = count
            print(f"Turnstile {n} yielding with temp={temp}.")
            print(f"Turnstile {n} back with temp={temp}.")
            count = temp + 1
            _yield(kernel)
        print(f"Turnstile {n} finished. Count is now {count}.")

    _run_turnstiles(kernel, turnstile)
    _report_garden(count)
    return count


def run_garden_semaphore(kernel: Any) -> int:
    """Ornamental garden whose counter update is guarded by a semaphore.

    Each turnstile yields in the middle of its update. Returns the final
    count.
    """
    count = 0
    semaphore = Semaphore(kernel, "testGardenSemaphore", 1)

    def turnstile(n: int) -> None:
        nonlocal count
        for _ in range(_ITERATIONS_PER_TURNSTILE):
            semaphore.p()
            temp = count
            _yield(kernel)
            print(f"Turnstile {n} yielding with temp={temp}.")
            print(f"Turnstile {n} back with temp={temp}.")
            count = temp + 1
            semaphore.v()
            _yield(kernel)
        print(f"Turnstile {n} finished. Count is now {count}.")

    _run_turnstiles(kernel, turnstile)
    _report_garden(count)
    return count


def run_prod_cons(kernel: Any) -> List[int]:
    """Producer and consumer sharing a three-slot ring buffer.

    Returns the items in the order the consumer took them.
    """
    buffer = [0] * _BUFFER_SIZE
    head = _EMPTY
    tail = _EMPTY
    consumed: List[int] = []
    lock = Lock(kernel, "Lock")
    not_full = Condition(kernel, "condition", lock)
    not_empty = Condition(kernel, "condition", lock)

    def producer(_arg: Any) -> None:
        nonlocal head, tail
        for item in range(1, _ITEMS + 1):
            with lock:
                while (tail + 1) % _BUFFER_SIZE == head:
                    print("Productor esperando (buffer lleno)")
                    not_full.wait()
                if head == _EMPTY:
                    head = 0
                    tail = 0
                else:
                    tail = (tail + 1) % _BUFFER_SIZE
                buffer[tail] = item
                print(f"Productor produce: {buffer[tail]} en {tail}")
                not_empty.signal()

    def consumer(_arg: Any) -> None:
        nonlocal head, tail
        while len(consumed) < _ITEMS:
            with lock:
                while head == _EMPTY:
                    print("Consumidor esperando (buffer vacio)")
                    not_empty.wait()
                print(f"Consumidor consume: {buffer[head]} en {head}")
                consumed.append(buffer[head])
                if head == tail:
                    head = _EMPTY
                    tail = _EMPTY
                else:
                    head = (head + 1) % _BUFFER_SIZE
                not_full.signal()

    Thread(kernel, "Producer").fork(producer)
    Thread(kernel, "Consumer").fork(consumer)
    while len(consumed) < _ITEMS:
        _yield(kernel)
    print("Todos los items fueron consumidos")
    return consumed


def run_channel(kernel: Any) -> List[int]:
    """A transmitter sends numbers to a receiver through a channel.

    Returns the messages in the order the receiver got them.
    """
    channel = Channel(kernel, "channelTest")
    remaining = _CHANNEL_MESSAGES
    received: List[int] = []

    def transmitter(_arg: Any) -> None:
        message = 0
        while remaining >= 0:
            print(f"Se envia el mensaje {message}. Quedan: {remaining} ")
            channel.send(message)
            message += 1

    def receiver(_arg: Any) -> None:
        nonlocal remaining
        while remaining >= 0:
            message = channel.receive()
            received.append(message)
            print(f"Se recibio el mensaje {message}. ")
            remaining -= 1

    Thread(kernel, "Emisor").fork(transmitter)
    Thread(kernel, "Receptor").fork(receiver)
    while remaining >= 0:
        _yield(kernel)
    print("Ya se enviaron todos los mensajes")
    return received


def run_join(kernel: Any) -> int:
    """Fork a joinable thread and wait for it with ``join``.

    Returns the exit status the join delivered.
    """

    def run_thread(_arg: Any) -> None:
        current = kernel.current_thread
        for num in range(_ITERATIONS):
            print(f"*** Thread `{current.name}` is running: iteration {num}")
            current.yield_cpu()
        print(f"!!! Thread `{current.name}` has finished RunThread")

    thread = Thread(kernel, "TestJoin", True)
    thread.fork(run_thread)
    print("Main thread before join.")
    status = thread.join()
    print("Main thread after join.")
    print("Test finished")
    return status


def run_scheduler_simple(kernel: Any) -> List[str]:
    """Two threads of different priority run without any locks.

    Returns the names of the threads in the order they finished.
    """
    threads_amount = 2
    done = [False] * threads_amount
    finished: List[str] = []

    def scheduler_thread(_arg: Any) -> None:
        current = kernel.current_thread
        for num in range(_ITERATIONS):
            print(f"*** Thread `{current.name}` is running: sch iteration {num}")
            current.yield_cpu()
        if current.name != "main":
            done[int(current.name)] = True
        finished.append(current.name)
        print(f"!!! Thread `{current.name}` has finished SimpleThread")

    for i in range(threads_amount):
        Thread(kernel, str(i), False, i + 5).fork(scheduler_thread)

    while not done[0] and not done[1]:
        _yield(kernel)

    print("Test finished")
    return finished


def run_scheduler_priority(kernel: Any) -> List[int]:
    """A high-priority thread waits for a lock held by the running thread.

    The holder inherits the waiter's priority until it releases the lock.
    Returns the priorities the calling thread reported at each step.
    """
    lock = Lock(kernel, "lockTestScheduler")
    done = [False]
    observed: List[int] = []

    def report() -> None:
        current = kernel.current_thread
        observed.append(current.priority)
        print(
            f"*** Thread `{current.name}` (W/ priority {current.priority}) "
            "is running "
        )

    def priority_thread(_arg: Any) -> None:
        current = kernel.current_thread
        with lock:
            for num in range(_ITERATIONS):
                print(
                    f"*** Thread `{current.name}` (W/ priority {current.priority}) "
                    f"is running: sch iteration {num}"
                )
                current.yield_cpu()
        if current.name != "main":
            done[int(current.name)] = True
        print(f"!!! Thread `{current.name}` has finished SimpleThread")

    lock.acquire()
    report()
    Thread(kernel, "0", False, 7).fork(priority_thread)
    _yield(kernel)
    report()
    lock.release()
    report()

    while not done[0]:
        _yield(kernel)

    print("Test finished")
    return observed