"""Callback dispatchers deciding which thread runs listener callbacks."""

from __future__ import annotations

import logging
import queue
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Dispatcher(Protocol):
    def post(self, callback: Callback) -> None: ...


def _run(callback: Callback) -> None:
    try:
        callback()
    except Exception:
        logger.exception("Listener callback raised")


class ImmediateDispatcher:
    """Runs callbacks right away on the posting (worker) thread."""

    def post(self, callback: Callback) -> None:
        _run(callback)


class QueueDispatcher:
    """Queues callbacks until the owning thread runs them.

    The thread that owns caller-side state (typically the main thread) calls
    :meth:`run_pending` from its loop, or :meth:`drain` to wait for work.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Callback] = queue.SimpleQueue()

    def post(self, callback: Callback) -> None:
        self._queue.put(callback)

    def run_pending(self) -> int:
        """Run every queued callback without blocking. Returns how many ran."""
        count = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return count
            _run(callback)
            count += 1

    def drain(self, timeout: float | None = None, until: Callable[[], bool] | None = None) -> int:
        """Run callbacks as they arrive.

        Stops when ``until()`` returns true, or when ``timeout`` seconds pass.
        Without ``until`` it returns after the first callback that ran.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        count = 0
        while True:
            if until is not None and until():
                return count
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return count
            try:
                callback = self._queue.get(timeout=remaining)
            except queue.Empty:
                return count
            _run(callback)
            count += 1
            count += self.run_pending()
            if until is None:
                return count
