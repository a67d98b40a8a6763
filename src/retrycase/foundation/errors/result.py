"""Result type for terminal retry outcomes.

A discriminated union of ``Ok`` (a recovered value) and ``Err`` (the failure
to surface). Exhaustion handling returns one of these instead of a generic
method that can only raise; ``unwrap()`` turns an ``Err`` carrying an
exception back into a raise for callers that want the exception style.

Examples:
    >>> Ok(42).unwrap()
    42
    >>> Err(ValueError("x")).is_err()
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant holding a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise RuntimeError(f"unwrap_err() on Ok: {self.value!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant holding an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raise the held error if it is an exception, else a RuntimeError."""
        if isinstance(self.error, BaseException):
            # Keep the cause set by whoever built the error
            raise self.error
        raise RuntimeError(f"unwrap() on Err: {self.error!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[object], U]) -> Err[E]:
        return self

    def __bool__(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]
