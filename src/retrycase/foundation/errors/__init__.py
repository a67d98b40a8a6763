"""Error handling for retrycase.

- ErrorCode: codes carried by retry errors
- RetryError and subclasses: exhaustion, cancelled back-off, bad config
- Result/Ok/Err: terminal outcome of exhaustion handling
"""

from .errors import (
    EXHAUSTED_MESSAGE,
    BackOffCancelledError,
    ErrorCode,
    ExhaustedRetryError,
    InvalidPolicyError,
    RetryError,
)
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode", "RetryError", "ExhaustedRetryError", "BackOffCancelledError", "InvalidPolicyError",
    "EXHAUSTED_MESSAGE",
    "Result", "Ok", "Err",
]
