"""Atomic cells for policy tunables.

Each cell guards whole-value reads and writes with its own lock, so no
reader ever sees a partially written value. Two cells are independent:
reading one and then the other during a concurrent write may combine an old
value with a new one. Callers needing both values consistently use the
policy's ``snapshot()``.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class AtomicCell(Generic[T]):
    """Lock-guarded mutable value with optional validation on write."""

    __slots__ = ("_value", "_lock", "_validate")

    def __init__(self, value: T, validate: Callable[[T], T] | None = None) -> None:
        self._validate = validate
        self._lock = threading.Lock()
        self._value = validate(value) if validate else value

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        """Replace the value. Validation runs before the lock; a failure leaves the old value."""
        checked = self._validate(value) if self._validate else value
        with self._lock:
            self._value = checked

    def __repr__(self) -> str:
        return f"AtomicCell({self.get()!r})"
