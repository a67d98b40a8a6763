"""Retry policy and per-operation retry context.

Example:
    >>> from retrycase.runtime.retry import RetryContext, SimpleRetryPolicy
    >>> from retrycase.foundation.categories import TRANSIENT
    >>>
    >>> policy = SimpleRetryPolicy(max_attempts=5, back_off_period=0.2, retryable={TRANSIENT})
    >>> ctx = RetryContext()
    >>> policy.register_throwable(ctx, TimeoutError("upstream slow"))
    >>> policy.can_retry(ctx)
    True
"""

from .config import (
    DEFAULT_BACK_OFF_PERIOD,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRYABLE,
    RetryPolicyConfig,
)
from .context import ContextState, RetryContext
from .policy import PolicySnapshot, RetryPolicy, SimpleRetryPolicy
from .tunable import AtomicCell

__all__ = [
    # Context
    "RetryContext",
    "ContextState",
    # Policy
    "RetryPolicy",
    "SimpleRetryPolicy",
    "PolicySnapshot",
    "RetryPolicyConfig",
    "AtomicCell",
    # Defaults
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_BACK_OFF_PERIOD",
    "DEFAULT_RETRYABLE",
]
