"""
Retry utilities with tenacity.

Wraps an async operation so that failures are retried with a
power-law backoff: after the n-th failure the wait is
``min(max_delay_ms, initial_delay_ms * n ** backoff_exponent)``,
less a random jitter of up to ``jitter_fraction`` of that delay.
"""

from __future__ import annotations

import asyncio
import functools
import random
from typing import TYPE_CHECKING, Any, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from .config.models import RetryPolicy, coerce_policy
from .logging import describe_operation, get_contextual_logger
from .wrapping import AsyncCallable, Sleep, ensure_operation, resolve_arguments

if TYPE_CHECKING:
    from .logging import ContextualLogger


class wait_backoff_jitter(wait_base):
    """Wait strategy implementing a RetryPolicy's backoff curve.

    Returns seconds, as tenacity expects.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.policy = policy
        self.rng = rng

    def delay_ms(self, failures: int) -> float:
        """Get the jittered delay in ms after ``failures`` failed attempts."""
        delay = self.policy.delay_for(failures)
        return delay - self.rng() * self.policy.jitter_fraction * delay

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.delay_ms(retry_state.attempt_number) / 1000.0


class RetryRunner:
    """An async operation wrapped with retries and backoff.

    Calling the runner calls the operation with the same arguments.
    Each call starts with a fresh attempt counter. When the attempts
    are exhausted the last error is re-raised unchanged.
    """

    def __init__(
        self,
        op: AsyncCallable,
        policy: RetryPolicy | None = None,
        *,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        sleep: Sleep | None = None,
    ) -> None:
        ensure_operation(op)
        functools.update_wrapper(self, op, updated=())
        self.op = op
        self.policy = policy or RetryPolicy()
        self.retry_on = retry_on
        self._sleep = sleep or asyncio.sleep
        self._wait = wait_backoff_jitter(self.policy)
        self.name = describe_operation(op)
        self._logger: ContextualLogger = get_contextual_logger(
            "retries", runner="retry", operation=self.name
        )

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        delay_ms = retry_state.next_action.sleep * 1000.0 if retry_state.next_action else 0.0
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "%s failed, retrying in %.0fms (attempt %d of %d): %r",
            self.name,
            delay_ms,
            retry_state.attempt_number,
            self.policy.max_attempts,
            error,
            extra={"attempt": retry_state.attempt_number, "delay_ms": round(delay_ms)},
        )

    def retrying(self) -> AsyncRetrying:
        """Build the tenacity controller for one invocation."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=self._before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        async for attempt in self.retrying():
            with attempt:
                return await self.op(*args, **kwargs)

    def __repr__(self) -> str:
        return f"RetryRunner({self.name}, {self.policy!r})"


def make_retry_runner(
    first: Any = None,
    second: Any = None,
    /,
    *,
    retry_on: tuple[type[BaseException], ...] | None = None,
    sleep: Sleep | None = None,
    **overrides: Any,
) -> Any:
    """Wrap an async operation with retries and exponential backoff.

    Can be used with or without arguments:

        @make_retry_runner
        async def fetch(url): ...

        @make_retry_runner(max_attempts=3, retry_on=(TimeoutError,))
        async def fetch(url): ...

        runner = make_retry_runner(fetch, RetryPolicy(max_attempts=3))
        runner = make_retry_runner({"max_attempts": 3})(fetch)

    Args:
        first: The operation or the policy
        second: The policy or the operation
        retry_on: Exception types to retry (default: Exception)
        sleep: Async sleep taking seconds (default: asyncio.sleep)
        **overrides: RetryPolicy fields applied on top of the policy

    Returns:
        A RetryRunner, or a decorator producing one

    Raises:
        pydantic.ValidationError: If the policy is invalid
    """
    op, policy = resolve_arguments(first, second)
    config: RetryPolicy = coerce_policy(RetryPolicy, policy, overrides)

    def decorator(fn: AsyncCallable) -> RetryRunner:
        return RetryRunner(
            fn,
            config,
            retry_on=(Exception,) if retry_on is None else retry_on,
            sleep=sleep,
        )

    if op is not None:
        return decorator(op)
    return decorator
