"""Tests for blocking and async back-off, including cancellation."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from retrycase import BackOffCancelledError, CancelToken, ErrorCode, RetryContext, SimpleRetryPolicy
from retrycase.runtime.concurrency import asleep, sleep
from retrycase.runtime.concurrency.cancel import wake_soon


# ═════════════════════════════════════════════════════════════════════════════
# Blocking back-off
# ═════════════════════════════════════════════════════════════════════════════


def test_back_off_waits_full_period() -> None:
    policy = SimpleRetryPolicy(back_off_period=0.05)

    start = time.monotonic()
    policy.back_off(RetryContext())

    assert time.monotonic() - start >= 0.045


def test_zero_back_off_does_not_block() -> None:
    policy = SimpleRetryPolicy(back_off_period=0)

    start = time.monotonic()
    for _ in range(100):
        policy.back_off(RetryContext())
        policy.back_off(RetryContext(), CancelToken())

    assert time.monotonic() - start < 0.5


def test_back_off_uses_current_period() -> None:
    policy = SimpleRetryPolicy(back_off_period=10.0)
    policy.back_off_period = 0.01

    start = time.monotonic()
    policy.back_off(RetryContext())

    assert time.monotonic() - start < 1.0


def test_back_off_cancelled_from_other_thread() -> None:
    policy = SimpleRetryPolicy(back_off_period=10.0)
    token = CancelToken()
    threading.Timer(0.05, token.cancel).start()

    start = time.monotonic()
    with pytest.raises(BackOffCancelledError) as info:
        policy.back_off(RetryContext(), token)

    assert time.monotonic() - start < 5.0
    assert info.value.code is ErrorCode.CANCELLED
    assert 0.0 < info.value.waited < 5.0


def test_back_off_already_cancelled_raises_immediately() -> None:
    token = CancelToken()
    token.cancel("shutdown")

    with pytest.raises(BackOffCancelledError) as info:
        SimpleRetryPolicy(back_off_period=10.0).back_off(RetryContext(), token)

    assert info.value.waited == 0.0
    assert token.reason == "shutdown"


def test_uncancelled_token_waits_full_period() -> None:
    start = time.monotonic()
    completed, waited = sleep(0.05, CancelToken())

    assert completed
    assert waited >= 0.045
    assert time.monotonic() - start >= 0.045


# ═════════════════════════════════════════════════════════════════════════════
# Async back-off
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_back_off_async_waits_full_period() -> None:
    policy = SimpleRetryPolicy(back_off_period=0.05)
    loop = asyncio.get_running_loop()

    start = loop.time()
    await policy.back_off_async(RetryContext())

    assert loop.time() - start >= 0.045


@pytest.mark.asyncio
async def test_back_off_async_does_not_hold_the_loop() -> None:
    """Other tasks make progress while a back-off is pending."""
    policy = SimpleRetryPolicy(back_off_period=0.1)
    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        for _ in range(5):
            await asyncio.sleep(0.01)
            ticks += 1

    await asyncio.gather(policy.back_off_async(RetryContext()), ticker())

    assert ticks == 5


@pytest.mark.asyncio
async def test_zero_back_off_async_does_not_block() -> None:
    policy = SimpleRetryPolicy(back_off_period=0)
    loop = asyncio.get_running_loop()

    start = loop.time()
    for _ in range(100):
        await policy.back_off_async(RetryContext())
        await policy.back_off_async(RetryContext(), CancelToken())

    assert loop.time() - start < 0.5


@pytest.mark.asyncio
async def test_back_off_async_cancelled_by_token_from_thread() -> None:
    policy = SimpleRetryPolicy(back_off_period=10.0)
    token = CancelToken()
    threading.Timer(0.05, token.cancel).start()

    with pytest.raises(BackOffCancelledError) as info:
        await policy.back_off_async(RetryContext(), token)

    assert info.value.waited < 5.0


@pytest.mark.asyncio
async def test_back_off_async_cancelled_by_token_in_loop() -> None:
    policy = SimpleRetryPolicy(back_off_period=10.0)
    token = CancelToken()
    asyncio.get_running_loop().call_later(0.02, token.cancel)

    with pytest.raises(BackOffCancelledError):
        await policy.back_off_async(RetryContext(), token)


@pytest.mark.asyncio
async def test_back_off_async_already_cancelled() -> None:
    token = CancelToken()
    token.cancel()

    with pytest.raises(BackOffCancelledError):
        await SimpleRetryPolicy(back_off_period=10.0).back_off_async(RetryContext(), token)


@pytest.mark.asyncio
async def test_task_cancellation_propagates() -> None:
    """Cancelling the awaiting task raises CancelledError, not BackOffCancelledError."""
    policy = SimpleRetryPolicy(back_off_period=10.0)
    token = CancelToken()
    task = asyncio.create_task(policy.back_off_async(RetryContext(), token))
    await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    token.cancel()  # late cancel after the waiter is gone is harmless


@pytest.mark.asyncio
async def test_asleep_reports_completion() -> None:
    completed, waited = await asleep(0.02, CancelToken())

    assert completed
    assert waited >= 0.015


# ═════════════════════════════════════════════════════════════════════════════
# CancelToken
# ═════════════════════════════════════════════════════════════════════════════


def test_cancel_token_is_idempotent() -> None:
    token = CancelToken()
    calls: list[int] = []
    token.add_callback(lambda: calls.append(1))

    token.cancel("first")
    token.cancel("second")

    assert token.cancelled
    assert token.reason == "first"
    assert calls == [1]


def test_callback_after_cancel_runs_immediately() -> None:
    token = CancelToken()
    token.cancel()
    calls: list[int] = []

    token.add_callback(lambda: calls.append(1))

    assert calls == [1]


def test_removed_callback_not_called() -> None:
    token = CancelToken()
    calls: list[int] = []
    remove = token.add_callback(lambda: calls.append(1))

    remove()
    token.cancel()

    assert calls == []


def test_wake_on_closed_loop_is_ignored() -> None:
    loop = asyncio.new_event_loop()
    fut: asyncio.Future[None] = loop.create_future()
    loop.close()

    wake_soon(loop, fut)

    assert not fut.done()


def test_closed_loop_waiter_does_not_block_other_callbacks() -> None:
    """Cancelling after a waiter's loop closed still runs every callback."""
    loop = asyncio.new_event_loop()
    fut: asyncio.Future[None] = loop.create_future()
    loop.close()
    token = CancelToken()
    calls: list[int] = []
    token.add_callback(lambda: wake_soon(loop, fut))
    token.add_callback(lambda: calls.append(1))

    token.cancel()

    assert token.cancelled
    assert calls == [1]
