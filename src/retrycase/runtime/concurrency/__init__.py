"""Concurrency primitives used by back-off: cancel tokens and cancellable sleeps."""

from __future__ import annotations

from .cancel import CancelToken, asleep, sleep

__all__ = ["CancelToken", "sleep", "asleep"]
