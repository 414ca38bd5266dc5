"""
Unit tests for resilient_dispatch.core.retry.executor.AsyncRetryExecutor.

Coroutines are driven with ``asyncio.run`` so no asyncio pytest plugin is
required.
"""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from resilient_dispatch.core.errors import ExhaustedError, RetryCancelledError, TransientError
from resilient_dispatch.core.retry.executor import AsyncRetryExecutor
from resilient_dispatch.domain.models import RetryPolicy


class FakeAsyncSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class AsyncFlaky:
    def __init__(self, failures: int, value: str = "ok"):
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientError(f"timeout #{self.calls}")
        return self.value


def _executor(sleep: FakeAsyncSleep, **policy) -> AsyncRetryExecutor:
    return AsyncRetryExecutor(policy=RetryPolicy(**policy), sleep=sleep, jitter=lambda: 0.0)


def test_async_success_without_delay() -> None:
    sleep = FakeAsyncSleep()
    op = AsyncFlaky(failures=0, value="sent")

    assert asyncio.run(_executor(sleep).run(op)) == "sent"
    assert op.calls == 1
    assert sleep.delays == []


def test_async_recovers_with_backoff() -> None:
    sleep = FakeAsyncSleep()
    op = AsyncFlaky(failures=3)

    assert asyncio.run(_executor(sleep).run(op)) == "ok"
    assert sleep.delays == [1.0, 2.0, 4.0]


def test_async_exhaustion() -> None:
    sleep = FakeAsyncSleep()
    op = AsyncFlaky(failures=10)

    with pytest.raises(ExhaustedError) as ei:
        asyncio.run(_executor(sleep, max_retries=2).run(op))

    assert op.calls == 3
    assert ei.value.attempts == 3


def test_async_fatal_propagates_unmodified() -> None:
    sleep = FakeAsyncSleep()
    boom = KeyError("missing")

    async def op() -> None:
        raise boom

    with pytest.raises(KeyError) as ei:
        asyncio.run(_executor(sleep).run(op))
    assert ei.value is boom
    assert sleep.delays == []


def test_async_cancel_event_aborts_wait() -> None:
    op = AsyncFlaky(failures=5)

    async def main() -> None:
        cancel = asyncio.Event()
        cancel.set()
        executor = AsyncRetryExecutor(policy=RetryPolicy(base_delay_s=30.0, max_delay_s=30.0))
        await executor.run(op, cancel=cancel)

    with pytest.raises(RetryCancelledError):
        asyncio.run(main())
    assert op.calls == 1


def test_async_unset_cancel_event_retries_after_timeout() -> None:
    op = AsyncFlaky(failures=2)

    async def main() -> str:
        cancel = asyncio.Event()
        executor = AsyncRetryExecutor(policy=RetryPolicy(base_delay_s=0.001, max_delay_s=0.01))
        return await executor.run(op, cancel=cancel)

    assert asyncio.run(main()) == "ok"
    assert op.calls == 3


def test_wait_does_not_block_other_tasks() -> None:
    ticks: List[int] = []

    async def ticker() -> None:
        for i in range(5):
            ticks.append(i)
            await asyncio.sleep(0)

    async def main():
        executor = AsyncRetryExecutor(policy=RetryPolicy(max_retries=1, base_delay_s=0.05, max_delay_s=0.05))
        op = AsyncFlaky(failures=1)
        other = asyncio.create_task(ticker())
        result = await executor.run(op)
        seen_during_wait = list(ticks)
        await other
        return result, seen_during_wait

    result, seen = asyncio.run(main())
    assert result == "ok"
    assert seen == [0, 1, 2, 3, 4]
