"""Synchronous rendezvous channel carrying one message at a time."""

from __future__ import annotations

from typing import Any

from kthreads.lock import Lock
from kthreads.semaphore import Semaphore


class Channel:
    """A channel where ``send`` and ``receive`` meet.

    A sender blocks until a receiver is waiting and has taken the message;
    a receiver blocks until a sender hands it one.
    """

    def __init__(self, kernel: Any, name: str) -> None:
        self.name = name
        self._receiver_ready = Semaphore(kernel, "SendS", 0)
        self._message_ready = Semaphore(kernel, "RecvS", 0)
        self._copied = Semaphore(kernel, "Coppied", 0)
        self._lock = Lock(kernel, "l")
        self._buffer: Any = None

    def send(self, message: Any) -> None:
        """Hand ``message`` to a receiver, waiting until it has been taken."""
        self._receiver_ready.p()
        with self._lock:
            self._buffer = message
            self._message_ready.v()
            self._copied.p()

    def receive(self) -> Any:
        """Wait for a sender and return its message."""
        self._receiver_ready.v()
        self._message_ready.p()
        message = self._buffer
        self._copied.v()
        return message