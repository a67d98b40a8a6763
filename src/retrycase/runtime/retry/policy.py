"""Fixed-delay retry policy.

The policy decides whether a failed operation may run again, waits between
attempts, and produces the terminal failure once attempts run out. It never
runs the operation: callers own the loop and a RetryContext per operation.

One policy instance is meant to be shared by many concurrent loops. It holds
no per-operation state; ``max_attempts`` and ``back_off_period`` live in
atomic cells and may be rewritten at any time.

Example:
    >>> policy = SimpleRetryPolicy(max_attempts=3, back_off_period=0.5)
    >>> ctx = RetryContext()
    >>> while True:
    ...     try:
    ...         result = fetch()
    ...         break
    ...     except Exception as e:
    ...         policy.register_throwable(ctx, e)
    ...         if not policy.can_retry(ctx):
    ...             result = policy.handle_retry_exhausted(ctx)
    ...             break
    ...         policy.back_off(ctx)
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Generic, NamedTuple, Protocol, TypeVar, runtime_checkable

from retrycase.foundation.categories import FailureCategory, category_of, matches_any
from retrycase.foundation.errors import BackOffCancelledError, Err, ExhaustedRetryError, Ok, Result
from retrycase.runtime.concurrency import CancelToken, asleep, sleep

from .config import (
    DEFAULT_BACK_OFF_PERIOD,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRYABLE,
    RetryPolicyConfig,
    check_back_off_period,
    check_max_attempts,
)
from .context import RetryContext
from .tunable import AtomicCell

if TYPE_CHECKING:
    from collections.abc import Iterable

    from retrycase.foundation.config import RetrycaseSettings


logger = logging.getLogger("retrycase.retry")

T = TypeVar("T")

Classifier = Callable[[BaseException], FailureCategory]
RetryCallback = Callable[[RetryContext, BaseException], None]
Recovery = Callable[[RetryContext], T]


def _describe(failure: BaseException) -> str:
    """``Type: message`` for log lines; a failing ``__str__`` is reported, not raised."""
    try:
        return f"{type(failure).__name__}: {failure}"
    except Exception:
        return f"{type(failure).__name__}: <exception str() failed>"


@runtime_checkable
class RetryPolicy(Protocol):
    """Capability interface consumed by retry loops.

    Alternate policies implement this protocol directly rather than
    subclassing SimpleRetryPolicy.
    """

    def can_retry(self, context: RetryContext) -> bool: ...
    def register_throwable(self, context: RetryContext, failure: BaseException) -> None: ...
    def back_off(self, context: RetryContext, cancel: CancelToken | None = None) -> None: ...
    async def back_off_async(self, context: RetryContext, cancel: CancelToken | None = None) -> None: ...
    def on_exhausted(self, context: RetryContext) -> Result[object, ExhaustedRetryError]: ...
    def handle_retry_exhausted(self, context: RetryContext) -> object: ...


class PolicySnapshot(NamedTuple):
    """Consistent view of both tunables."""
    max_attempts: int
    back_off_period: float


class SimpleRetryPolicy(Generic[T]):
    """Fixed-delay retry policy with category-based failure classification.

    Attempt counting includes the initial attempt, so ``max_attempts=3``
    permits 1 original call and 2 retries.

    Args:
        max_attempts: Ceiling on ``context.retry_count`` (default 3)
        back_off_period: Seconds (or timedelta) between attempts (default 1.0)
        retryable: Categories that permit a retry. Default matches every
            failure; None or an empty set never retries
        classifier: Maps a failure to its category (default ``category_of``)
        on_retry: Called after each registered failure with (context, failure)
        recovery: Produces a fallback value on exhaustion instead of failing

    Raises:
        InvalidPolicyError: If any option fails validation
    """

    __slots__ = ("_max_attempts", "_back_off_period", "_retryable", "_classifier",
                 "_on_retry", "_recovery", "_write_lock")

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        back_off_period: float | timedelta = DEFAULT_BACK_OFF_PERIOD,
        retryable: Iterable[FailureCategory | str] | FailureCategory | None = DEFAULT_RETRYABLE,
        *,
        classifier: Classifier = category_of,
        on_retry: RetryCallback | None = None,
        recovery: Recovery[T] | None = None,
    ) -> None:
        config = RetryPolicyConfig.build(
            max_attempts=max_attempts, back_off_period=back_off_period, retryable=retryable,
        )
        self._max_attempts = AtomicCell(config.max_attempts, check_max_attempts)
        self._back_off_period = AtomicCell(config.back_off_period, check_back_off_period)
        self._retryable = config.retryable
        self._classifier = classifier
        self._on_retry = on_retry
        self._recovery = recovery
        self._write_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: RetryPolicyConfig, **kw: object) -> SimpleRetryPolicy[T]:
        return cls(config.max_attempts, config.back_off_period, config.retryable, **kw)  # type: ignore[arg-type]

    @classmethod
    def from_settings(cls, settings: RetrycaseSettings | None = None, **kw: object) -> SimpleRetryPolicy[T]:
        """Build from environment settings (``RETRYCASE_RETRY_*``)."""
        from retrycase.foundation.config import get_settings
        return cls.from_config((settings or get_settings()).retry.to_policy_config(), **kw)

    # ─── Configuration ────────────────────────────────────────────────────

    @property
    def max_attempts(self) -> int:
        return self._max_attempts.get()

    @max_attempts.setter
    def max_attempts(self, value: int) -> None:
        self.reconfigure(max_attempts=value)

    @property
    def back_off_period(self) -> float:
        """Delay between attempts in seconds."""
        return self._back_off_period.get()

    @back_off_period.setter
    def back_off_period(self, value: float | timedelta) -> None:
        self.reconfigure(back_off_period=value)

    @property
    def retryable(self) -> frozenset[FailureCategory] | None:
        return self._retryable

    def reconfigure(self, *, max_attempts: int | None = None, back_off_period: float | timedelta | None = None) -> None:
        """Rewrite tunables. Both values are validated before either is written."""
        attempts = None if max_attempts is None else check_max_attempts(max_attempts)
        period = None if back_off_period is None else check_back_off_period(back_off_period)
        with self._write_lock:
            if attempts is not None:
                self._max_attempts.set(attempts)
            if period is not None:
                self._back_off_period.set(period)
        logger.debug(
            "Retry policy reconfigured: max_attempts=%d, back_off_period=%ss", self.max_attempts, self.back_off_period,
        )

    def snapshot(self) -> PolicySnapshot:
        """Read both tunables without interleaving a concurrent reconfigure."""
        with self._write_lock:
            return PolicySnapshot(self._max_attempts.get(), self._back_off_period.get())

    @property
    def config(self) -> RetryPolicyConfig:
        snap = self.snapshot()
        return RetryPolicyConfig(max_attempts=snap.max_attempts, back_off_period=snap.back_off_period,
                                 retryable=self._retryable)

    # ─── Decisions ────────────────────────────────────────────────────────

    def is_retryable(self, failure: BaseException) -> bool:
        """Whether ``failure``'s category is matched by a configured category."""
        return matches_any(self._retryable, self._classifier(failure))

    def can_retry(self, context: RetryContext) -> bool:
        """True while the last failure (if any) is retryable and attempts remain. No side effects."""
        last = context.last_exception
        return (last is None or self.is_retryable(last)) and context.retry_count < self.max_attempts

    def register_throwable(self, context: RetryContext, failure: BaseException) -> None:
        context.register_exception(failure)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Attempt %d/%d failed: %s", context.retry_count, self.max_attempts, _describe(failure))
        if self._on_retry:
            self._on_retry(context, failure)

    # ─── Back-off ─────────────────────────────────────────────────────────

    def back_off(self, context: RetryContext, cancel: CancelToken | None = None) -> None:
        """Block the calling thread for ``back_off_period``.

        Raises:
            BackOffCancelledError: If ``cancel`` fires before the period elapses
        """
        period = self.back_off_period
        logger.debug("Backing off %.3fs after attempt %d", period, context.retry_count)
        completed, waited = sleep(period, cancel)
        if not completed:
            raise BackOffCancelledError(waited=waited)

    async def back_off_async(self, context: RetryContext, cancel: CancelToken | None = None) -> None:
        """Suspend the calling task for ``back_off_period`` without holding a thread.

        Raises:
            BackOffCancelledError: If ``cancel`` fires before the period elapses
        """
        period = self.back_off_period
        logger.debug("Backing off %.3fs (async) after attempt %d", period, context.retry_count)
        completed, waited = await asleep(period, cancel)
        if not completed:
            raise BackOffCancelledError(waited=waited)

    # ─── Exhaustion ───────────────────────────────────────────────────────

    def on_exhausted(self, context: RetryContext) -> Result[T, ExhaustedRetryError]:
        """Terminal outcome: Ok(fallback) when a recovery is configured, else Err(ExhaustedRetryError)."""
        if self._recovery is not None:
            logger.info("Retries exhausted after %d attempts, recovering", context.retry_count)
            return Ok(self._recovery(context))
        last = context.last_exception
        outcome = Err(ExhaustedRetryError.from_last(last))
        if last is None:
            logger.warning("Retries exhausted after %d attempts", context.retry_count)
        else:
            logger.warning("Retries exhausted after %d attempts (last: %s)", context.retry_count, _describe(last))
        return outcome

    def handle_retry_exhausted(self, context: RetryContext) -> T:
        """Return the recovered value or raise ExhaustedRetryError chained to the last failure."""
        return self.on_exhausted(context).unwrap()

    def __repr__(self) -> str:
        cats = None if self._retryable is None else sorted(c.name for c in self._retryable)
        return (f"SimpleRetryPolicy(max_attempts={self.max_attempts}, "
                f"back_off_period={self.back_off_period}, retryable={cats})")
