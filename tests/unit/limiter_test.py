"""Tests for the concurrency rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from cargo_check_i18n.llm.limiter import RateLimiter


def test_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        RateLimiter(0)


@pytest.mark.asyncio
async def test_never_exceeds_limit() -> None:
    limiter = RateLimiter(3)
    peak = 0

    async def _work() -> None:
        nonlocal peak
        async with limiter:
            peak = max(peak, limiter.in_flight)
            await asyncio.sleep(0.01)

    await asyncio.gather(*(_work() for _ in range(20)))

    assert peak == 3
    assert limiter.in_flight == 0


@pytest.mark.asyncio
async def test_permit_is_returned_on_failure() -> None:
    limiter = RateLimiter(1)

    async def _fail() -> None:
        async with limiter:
            raise RuntimeError("boom")

    for _ in range(3):
        with pytest.raises(RuntimeError):
            await _fail()

    await asyncio.wait_for(limiter.acquire(), timeout=1)
    limiter.release()
    assert limiter.in_flight == 0


@pytest.mark.asyncio
async def test_acquire_waits_for_release() -> None:
    limiter = RateLimiter(1)
    await limiter.acquire()

    waiter = asyncio.create_task(limiter.acquire())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    limiter.release()
    await asyncio.wait_for(waiter, timeout=1)
    limiter.release()
