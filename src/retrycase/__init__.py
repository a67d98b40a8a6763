"""retrycase - fixed-delay retry policy for fallible operations.

The policy decides whether a failed operation may be attempted again, waits
between attempts (blocking or async, optionally cancellable), and produces
the terminal failure when attempts run out. Callers own the loop.

Quick Start:
    >>> from retrycase import RetryContext, SimpleRetryPolicy
    >>>
    >>> policy = SimpleRetryPolicy(max_attempts=3, back_off_period=0.5)
    >>> ctx = RetryContext()
    >>> while True:
    ...     try:
    ...         value = fetch()
    ...         break
    ...     except Exception as e:
    ...         policy.register_throwable(ctx, e)
    ...         if not policy.can_retry(ctx):
    ...             policy.handle_retry_exhausted(ctx)  # raises ExhaustedRetryError
    ...         policy.back_off(ctx)

Async callers use ``await policy.back_off_async(ctx)``; pass a CancelToken
to either back-off to interrupt it from another thread.

Restricting what is retried:
    >>> from retrycase import TRANSIENT, CategorizedError
    >>> policy = SimpleRetryPolicy(retryable={TRANSIENT})
    >>> # TimeoutError and ConnectionError map to TRANSIENT children by default
"""

from __future__ import annotations

__version__ = "0.1.0"

# Categories
from .foundation.categories import (
    ANY,
    NETWORK,
    PERMANENT,
    RATE_LIMITED,
    TIMEOUT,
    TRANSIENT,
    UNCATEGORIZED,
    Categorized,
    CategorizedError,
    CategoryRegistry,
    FailureCategory,
    category_by_name,
    category_of,
    get_category_registry,
    register_category,
    reset_category_registry,
)

# Errors
from .foundation.errors import (
    BackOffCancelledError,
    Err,
    ErrorCode,
    ExhaustedRetryError,
    InvalidPolicyError,
    Ok,
    Result,
    RetryError,
)

# Config
from .foundation.config import (
    LoggingSettings,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

# Retry
from .runtime.retry import (
    ContextState,
    PolicySnapshot,
    RetryContext,
    RetryPolicy,
    RetryPolicyConfig,
    SimpleRetryPolicy,
)

# Concurrency
from .runtime.concurrency import CancelToken

# Observability
from .observability import configure_logging

__all__ = [
    "__version__",
    # Categories
    "FailureCategory", "Categorized", "CategorizedError", "CategoryRegistry",
    "ANY", "TRANSIENT", "TIMEOUT", "NETWORK", "RATE_LIMITED", "PERMANENT", "UNCATEGORIZED",
    "category_of", "category_by_name", "register_category", "get_category_registry", "reset_category_registry",
    # Errors
    "ErrorCode", "RetryError", "ExhaustedRetryError", "BackOffCancelledError", "InvalidPolicyError",
    "Result", "Ok", "Err",
    # Config
    "RetrycaseSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Retry
    "RetryContext", "ContextState", "RetryPolicy", "SimpleRetryPolicy", "PolicySnapshot", "RetryPolicyConfig",
    # Concurrency
    "CancelToken",
    # Observability
    "configure_logging",
]
