"""Error types raised by retry policies.

Provides error codes and a small exception hierarchy so callers can tell
exhaustion, cancelled back-off and bad configuration apart without string
matching. Operation failures themselves are never wrapped here except as the
cause of an exhaustion error.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable codes carried by every RetryError.

    Using StrEnum allows these to serialize cleanly and be pattern-matched.
    """
    EXHAUSTED = "EXHAUSTED"
    CANCELLED = "CANCELLED"
    INVALID_CONFIG = "INVALID_CONFIG"


EXHAUSTED_MESSAGE = "Retry exhausted after last attempt with no recovery path."


class RetryError(Exception):
    """Base class for errors raised by the retry machinery itself."""

    code: ErrorCode = ErrorCode.EXHAUSTED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class ExhaustedRetryError(RetryError):
    """No more attempts are permitted and no recovery path was supplied.

    The last registered operation failure is attached as ``__cause__`` so
    tracebacks lead back to the failure that triggered the final attempt.
    """

    code = ErrorCode.EXHAUSTED

    @classmethod
    def from_last(cls, last: BaseException | None, message: str = EXHAUSTED_MESSAGE) -> Self:
        """Create with ``last`` chained as the cause (may be None)."""
        err = cls(message)
        err.__cause__ = last
        return err

    @property
    def last_exception(self) -> BaseException | None:
        return self.__cause__


class BackOffCancelledError(RetryError):
    """A pending back-off was interrupted through its cancel token."""

    code = ErrorCode.CANCELLED

    def __init__(self, message: str = "Back-off cancelled before the period elapsed", *, waited: float = 0.0) -> None:
        super().__init__(message)
        self.waited = waited


class InvalidPolicyError(RetryError, ValueError):
    """Policy configuration failed validation."""

    code = ErrorCode.INVALID_CONFIG

    @classmethod
    def from_validation(cls, exc: ValidationError) -> Self:
        """Flatten a pydantic ValidationError into a single readable message."""
        parts = [
            f"{'.'.join(str(p) for p in e['loc']) or 'value'}: {e['msg']}"
            for e in exc.errors()
        ]
        return cls(f"Invalid retry policy configuration: {'; '.join(parts)}")
