"""
Resilient operation executor (retry with exponential backoff and jitter).

The executor is generic: it never inspects error types itself. A caller
supplied predicate decides whether a failure is transient (retry) or fatal
(propagate unchanged). By default errors are classified by the tag they were
raised with (`TransientError` vs anything else).

Two flavours share the same policy and bookkeeping:

- `RetryExecutor`: blocks only the calling thread between attempts; an
  optional `threading.Event` cancels the wait.
- `AsyncRetryExecutor`: suspends only the calling task via ``asyncio.sleep``;
  an optional `asyncio.Event` cancels the wait.
"""

from __future__ import annotations

import asyncio
import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple, TypeVar

from resilient_dispatch.core.errors import ExhaustedError, RetryCancelledError, TransientError
from resilient_dispatch.domain.models import RetryPolicy
from resilient_dispatch.observability.sink import ObservabilitySink, Reporter

T = TypeVar("T")

Classifier = Callable[[BaseException], bool]

MAX_JITTER_FRACTION = 0.10


def is_transient_error(error: BaseException) -> bool:
    """Default classifier: only errors tagged `TransientError` are retried."""
    return isinstance(error, TransientError)


def default_jitter() -> float:
    """Uniform jitter fraction in ``[0, MAX_JITTER_FRACTION]``."""
    return random.uniform(0.0, MAX_JITTER_FRACTION)


def compute_delay(policy: RetryPolicy, retry_number: int, jitter_fraction: float = 0.0) -> float:
    """
    Compute the wait before retry ``retry_number`` (1-based).

    ``raw = base * multiplier ** (n - 1)``; the jitter adds ``fraction * raw``
    and the result is capped at ``policy.max_delay_s``.

    Parameters
    ----------
    policy
        Retry policy.
    retry_number
        1 for the wait before the second attempt, 2 before the third, ...
    jitter_fraction
        Additive jitter as a fraction of the raw delay, clamped to
        ``[0, MAX_JITTER_FRACTION]``.

    Returns
    -------
    float
        Delay in seconds.
    """
    if retry_number < 1:
        raise ValueError("retry_number starts at 1")
    fraction = min(max(jitter_fraction, 0.0), MAX_JITTER_FRACTION)
    exponent = retry_number - 1
    # Past the cap the power itself may overflow a float.
    if exponent * math.log(policy.backoff_multiplier) >= math.log(policy.max_delay_s / policy.base_delay_s):
        raw = policy.max_delay_s
    else:
        raw = policy.base_delay_s * policy.backoff_multiplier ** exponent
    return min(raw + fraction * raw, policy.max_delay_s)


@dataclass(frozen=True)
class AttemptOutcome:
    """
    Result of a single attempt inside one ``run`` call.

    Exactly one of ``value`` (success) or ``error`` (failure) is meaningful.

    Parameters
    ----------
    attempt
        1-based attempt number.
    succeeded
        True for a successful attempt.
    value
        Returned value on success.
    error
        Raised exception on failure.
    transient
        Classification of the failure; always False on success.
    """

    attempt: int
    succeeded: bool
    value: Any = None
    error: Optional[BaseException] = None
    transient: bool = False

    @classmethod
    def success(cls, attempt: int, value: Any) -> "AttemptOutcome":
        return cls(attempt=attempt, succeeded=True, value=value)

    @classmethod
    def failure(cls, attempt: int, error: BaseException, transient: bool) -> "AttemptOutcome":
        return cls(attempt=attempt, succeeded=False, error=error, transient=transient)


class _RetryCore:
    """Policy, jitter and reporting shared by the sync and async executors."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sink: Optional[ObservabilitySink] = None,
        jitter: Callable[[], float] = default_jitter,
    ):
        self.policy = policy or RetryPolicy()
        self._jitter = jitter
        self._log = Reporter(sink, type(self).__name__)

    def _classify(self, attempt: int, error: Exception, is_transient: Classifier) -> AttemptOutcome:
        return AttemptOutcome.failure(attempt, error, bool(is_transient(error)))

    def _next_delay_or_raise(
        self, outcome: AttemptOutcome, error: BaseException, policy: RetryPolicy, context: str
    ) -> float:
        """
        Decide what follows a failed attempt.

        Returns the delay before the next attempt, re-raises fatal errors as
        they are, and raises `ExhaustedError` once the budget is spent.
        """
        if not outcome.transient:
            self._log.warning(
                f"Non-transient error encountered, aborting retry: {error}",
                operation=context,
                attempt=outcome.attempt,
            )
            raise error

        self._log.warning(
            f"Transient error on attempt {outcome.attempt}: {error}",
            operation=context,
            attempt=outcome.attempt,
        )

        if outcome.attempt >= policy.max_attempts:
            raise ExhaustedError(
                f"{context} failed after {policy.max_retries} retries",
                attempts=outcome.attempt,
                last_error=error,
            ) from error

        delay = compute_delay(policy, outcome.attempt, self._jitter())
        self._log.info(
            f"Retrying {context} (retry {outcome.attempt}/{policy.max_retries}) after {delay:.3f}s",
            operation=context,
            delay_s=delay,
        )
        return delay


class RetryExecutor(_RetryCore):
    """
    Thread-blocking retry executor.

    One instance may run many operations sequentially (or from several
    threads) with the same default policy; it keeps no per-run state.

    Parameters
    ----------
    policy
        Default retry policy.
    sink
        Observability sink. ``None`` logs through the ``logging`` module.
    sleep
        Blocking sleep used when no cancel signal is supplied.
    jitter
        Source of jitter fractions in ``[0, 0.10]``.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sink: Optional[ObservabilitySink] = None,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = default_jitter,
    ):
        super().__init__(policy=policy, sink=sink, jitter=jitter)
        self._sleep = sleep

    def run(
        self,
        operation: Callable[[], T],
        is_transient: Classifier = is_transient_error,
        policy: Optional[RetryPolicy] = None,
        *,
        context: str = "operation",
        cancel: Optional[threading.Event] = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds, fails fatally, or the budget ends.

        Parameters
        ----------
        operation
            Zero-argument callable. Returning means success; raising an
            ``Exception`` means failure.
        is_transient
            Pure predicate classifying a failure as retryable.
        policy
            Overrides the executor's default policy for this call.
        context
            Operation name used in reports and error messages.
        cancel
            When set during an inter-attempt wait, the wait ends immediately
            and `RetryCancelledError` is raised.

        Returns
        -------
        T
            The operation's return value.

        Raises
        ------
        ExhaustedError
            Transient failures persisted for ``max_retries + 1`` attempts.
        RetryCancelledError
            ``cancel`` was set while waiting.
        Exception
            The first non-transient failure, unmodified.
        """
        pol = policy or self.policy
        attempt = 0
        while True:
            attempt += 1
            try:
                value = operation()
            except Exception as e:
                error = e
                outcome = self._classify(attempt, error, is_transient)
            else:
                return value

            delay = self._next_delay_or_raise(outcome, error, pol, context)
            if cancel is not None:
                if cancel.wait(delay):
                    self._log.warning(f"{context} cancelled while waiting to retry", operation=context)
                    raise RetryCancelledError(context, attempt, error)
            else:
                self._sleep(delay)

    def run_recording(
        self,
        operation: Callable[[], T],
        is_transient: Classifier = is_transient_error,
        policy: Optional[RetryPolicy] = None,
        *,
        context: str = "operation",
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[T, List[AttemptOutcome]]:
        """
        Like `run`, but also return every attempt outcome (last one included).

        Errors propagate exactly as in `run`.
        """
        outcomes: List[AttemptOutcome] = []

        def tracked() -> T:
            n = len(outcomes) + 1
            try:
                value = operation()
            except Exception as e:
                outcomes.append(AttemptOutcome.failure(n, e, bool(is_transient(e))))
                raise
            outcomes.append(AttemptOutcome.success(n, value))
            return value

        value = self.run(tracked, is_transient, policy, context=context, cancel=cancel)
        return value, outcomes


class AsyncRetryExecutor(_RetryCore):
    """
    Cooperative retry executor for ``asyncio``.

    The wait between attempts is ``asyncio.sleep`` so other tasks keep running.

    Parameters
    ----------
    policy
        Default retry policy.
    sink
        Observability sink. ``None`` logs through the ``logging`` module.
    sleep
        Awaitable sleep used when no cancel signal is supplied.
    jitter
        Source of jitter fractions in ``[0, 0.10]``.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sink: Optional[ObservabilitySink] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        jitter: Callable[[], float] = default_jitter,
    ):
        super().__init__(policy=policy, sink=sink, jitter=jitter)
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        is_transient: Classifier = is_transient_error,
        policy: Optional[RetryPolicy] = None,
        *,
        context: str = "operation",
        cancel: Optional[asyncio.Event] = None,
    ) -> T:
        """Async twin of `RetryExecutor.run`; same outcomes and errors."""
        pol = policy or self.policy
        attempt = 0
        while True:
            attempt += 1
            try:
                value = await operation()
            except Exception as e:
                error = e
                outcome = self._classify(attempt, error, is_transient)
            else:
                return value

            delay = self._next_delay_or_raise(outcome, error, pol, context)
            if cancel is not None:
                try:
                    await asyncio.wait_for(cancel.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    continue
                self._log.warning(f"{context} cancelled while waiting to retry", operation=context)
                raise RetryCancelledError(context, attempt, error)
            await self._sleep(delay)
