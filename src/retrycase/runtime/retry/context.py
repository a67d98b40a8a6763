"""Per-operation retry state."""

from __future__ import annotations

from enum import StrEnum


class ContextState(StrEnum):
    """Lifecycle of a RetryContext. There is no way back to FRESH."""
    FRESH = "fresh"            # Nothing registered yet
    REGISTERED = "registered"  # At least one failure registered


class RetryContext:
    """Attempt count and last failure for one logical operation.

    Owned by a single retry loop and never shared between threads, so no
    locking is done here. The count includes the initial attempt: after the
    first failure is registered ``retry_count`` is 1.

    Example:
        >>> ctx = RetryContext()
        >>> ctx.register_exception(TimeoutError("slow"))
        >>> ctx.retry_count, type(ctx.last_exception).__name__
        (1, 'TimeoutError')
    """

    __slots__ = ("_retry_count", "_last_exception")

    def __init__(self) -> None:
        self._retry_count = 0
        self._last_exception: BaseException | None = None

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def last_exception(self) -> BaseException | None:
        return self._last_exception

    @property
    def state(self) -> ContextState:
        return ContextState.FRESH if self._retry_count == 0 else ContextState.REGISTERED

    @property
    def is_fresh(self) -> bool:
        return self._retry_count == 0

    def register_exception(self, failure: BaseException) -> None:
        """Record ``failure`` as the latest and count one more attempt."""
        self._last_exception = failure
        self._retry_count += 1

    def __repr__(self) -> str:
        last = type(self._last_exception).__name__ if self._last_exception is not None else None
        return f"RetryContext(retry_count={self._retry_count}, last_exception={last})"
