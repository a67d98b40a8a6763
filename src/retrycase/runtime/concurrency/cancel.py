"""Cancellation tokens and cancellable sleeps.

A CancelToken can be cancelled from any thread. Sync waiters block on a
threading.Event; async waiters get a loop future resolved thread-safely
through ``call_soon_threadsafe``. Both sleeps return early once the token
is cancelled and report how long they actually waited.

Example:
    >>> token = CancelToken()
    >>> threading.Timer(0.1, token.cancel).start()
    >>> completed, waited = sleep(5.0, token)
    >>> completed
    False
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
import time
from typing import Callable


class CancelToken:
    """Thread-safe, one-shot cancellation signal."""

    __slots__ = ("_event", "_lock", "_callbacks", "_reason")

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Signal cancellation. Idempotent; only the first reason is kept."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            cb()

    def add_callback(self, cb: Callable[[], None]) -> Callable[[], None]:
        """Run ``cb`` on cancellation (immediately if already cancelled). Returns a remover."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(cb)
                return lambda: self._remove(cb)
        cb()
        return lambda: None

    def _remove(self, cb: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses. True if cancelled."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


def wake_soon(loop: asyncio.AbstractEventLoop, fut: asyncio.Future[None]) -> None:
    """Resolve ``fut`` on its loop from any thread. A closed loop is ignored."""
    # The waiter may have timed out and its loop closed before cancel() got here.
    with contextlib.suppress(RuntimeError):
        loop.call_soon_threadsafe(lambda: fut.done() or fut.set_result(None))


def sleep(seconds: float, cancel: CancelToken | None = None) -> tuple[bool, float]:
    """Block the calling thread for ``seconds``.

    Returns:
        (completed, waited) where completed is False if ``cancel`` fired first
    """
    start = time.monotonic()
    if cancel is None:
        if seconds > 0:
            time.sleep(seconds)
        return True, time.monotonic() - start
    if cancel.cancelled:
        return False, 0.0
    if seconds <= 0:
        return True, 0.0
    interrupted = cancel.wait(seconds)
    return not interrupted, time.monotonic() - start


async def asleep(seconds: float, cancel: CancelToken | None = None) -> tuple[bool, float]:
    """Suspend the calling task for ``seconds`` without holding a thread.

    Same contract as ``sleep``.
    """
    loop = asyncio.get_running_loop()
    start = loop.time()
    if cancel is None:
        await asyncio.sleep(max(seconds, 0.0))
        return True, loop.time() - start
    if cancel.cancelled:
        return False, 0.0
    if seconds <= 0:
        await asyncio.sleep(0)
        return True, 0.0

    fut: asyncio.Future[None] = loop.create_future()

    remove = cancel.add_callback(lambda: wake_soon(loop, fut))
    try:
        done, _ = await asyncio.wait({fut}, timeout=seconds)
    finally:
        remove()
        if not fut.done():
            fut.cancel()
    return not done, loop.time() - start
