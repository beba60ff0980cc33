"""
Batch runners.

Run a single-argument async operation over many inputs, at most
``batch_size`` calls at a time, with a pause of ``batch_delay_ms``
between consecutive batches:

- BatchJobRunner processes one batch per call and hands back a
  BatchJob snapshot the caller can inspect and pass back in.
- BatchRunner drives a BatchJobRunner to completion and returns only
  the outputs.

Neither runner retries. Wrap the operation in a RetryRunner for that.
"""

from __future__ import annotations

import asyncio
import functools
import time
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Generic, Iterable

from batchwise.core.config.models import BatchPolicy, coerce_policy
from batchwise.core.logging import describe_operation, get_contextual_logger
from batchwise.core.wrapping import (
    Operation,
    P,
    R,
    Sleep,
    ensure_operation,
    resolve_arguments,
)

from .base import BatchJob, as_job

if TYPE_CHECKING:
    from batchwise.core.logging import ContextualLogger


class BatchJobRunner(Generic[P, R]):
    """Step function advancing a BatchJob by one batch per call.

    Usage:
        step = BatchJobRunner(fetch, BatchPolicy(batch_size=8))
        job = BatchJob.from_inputs(urls)
        while not job.done:
            job = await step(job)
            show_progress(len(job.completed), job.total)

    The very first batch of a job starts immediately; every later
    batch waits ``batch_delay_ms`` first. If an operation fails the
    error propagates and no snapshot is returned; the caller can
    retry from the last snapshot it holds.
    """

    def __init__(
        self,
        op: Operation[P, R],
        policy: BatchPolicy | None = None,
        *,
        sleep: Sleep | None = None,
    ) -> None:
        ensure_operation(op)
        functools.update_wrapper(self, op, updated=())
        self.op = op
        self.policy = policy or BatchPolicy()
        self._sleep = sleep or asyncio.sleep
        self.name = describe_operation(op)
        self._logger: ContextualLogger = get_contextual_logger(
            "batching", runner="batch-with-progress", operation=self.name
        )

    def __call__(self, job: BatchJob[P, R] | Iterable[P]) -> Awaitable[BatchJob[P, R]]:
        """Process the next batch of ``job``.

        Raises:
            UsageError: Immediately, if the job is already complete
        """
        current = as_job(job)
        current.ensure_runnable()
        return self._step(current)

    async def _step(self, job: BatchJob[P, R]) -> BatchJob[P, R]:
        if not job.pending:
            return job

        if job.started:
            await self._sleep(self.policy.batch_delay_ms / 1000.0)

        t1 = time.monotonic()
        items = job.pending[: self.policy.batch_size]
        # All calls are dispatched before any is awaited
        results = await asyncio.gather(*(self.op(item) for item in items))
        updated = job.advance(len(items), results)

        self._logger.debug(
            "Batch of %d took %.3f seconds (%d/%d done)",
            len(results),
            time.monotonic() - t1,
            len(updated.completed),
            updated.total,
            extra={"batch_size": len(results)},
        )
        if not updated.in_progress:
            self._logger.debug("Batch complete")

        return updated

    async def iterate(self, job: BatchJob[P, R] | Iterable[P]) -> AsyncIterator[BatchJob[P, R]]:
        """Step the job until it drains, yielding every snapshot.

        Usage:
            async for snapshot in runner.iterate(urls):
                show_progress(len(snapshot.completed), snapshot.total)
        """
        current = as_job(job)
        current.ensure_runnable()
        while current.pending:
            current = await self._step(current)
            yield current

    def __repr__(self) -> str:
        return f"BatchJobRunner({self.name}, {self.policy!r})"


class BatchRunner(Generic[P, R]):
    """Run an operation over all inputs in batches, returning only the outputs.

    Any failure propagates and the outputs gathered so far in that call
    are discarded. Use BatchJobRunner when partial results matter.
    """

    def __init__(
        self,
        op: Operation[P, R],
        policy: BatchPolicy | None = None,
        *,
        sleep: Sleep | None = None,
    ) -> None:
        self._steps: BatchJobRunner[P, R] = BatchJobRunner(op, policy, sleep=sleep)
        functools.update_wrapper(self, op, updated=())
        self._logger: ContextualLogger = get_contextual_logger(
            "batching", runner="batch", operation=self._steps.name
        )

    @property
    def op(self) -> Operation[P, R]:
        return self._steps.op

    @property
    def policy(self) -> BatchPolicy:
        return self._steps.policy

    async def __call__(self, inputs: Iterable[P]) -> list[R]:
        t0 = time.monotonic()
        job: BatchJob[P, R] = BatchJob.from_inputs(inputs)

        async for job in self._steps.iterate(job):
            pass

        self._logger.debug(
            "Total batch of %d took %.3f seconds",
            len(job.completed),
            time.monotonic() - t0,
        )
        return list(job.completed)

    def __repr__(self) -> str:
        return f"BatchRunner({self._steps.name}, {self.policy!r})"


def make_batch_job_runner(
    first: Any = None,
    second: Any = None,
    /,
    *,
    sleep: Sleep | None = None,
    **overrides: Any,
) -> Any:
    """Wrap an async operation in a one-batch-per-call step function.

    Accepts the operation and the policy in either order:

        step = make_batch_job_runner(fetch)
        step = make_batch_job_runner(fetch, BatchPolicy(batch_size=8))
        step = make_batch_job_runner({"batch_size": 8})(fetch)
        step = make_batch_job_runner(batch_size=8, batch_delay_ms=0)(fetch)

    Args:
        first: The operation or the policy
        second: The policy or the operation
        sleep: Async sleep taking seconds (default: asyncio.sleep)
        **overrides: BatchPolicy fields applied on top of the policy

    Returns:
        A BatchJobRunner, or a decorator producing one
    """
    op, policy = resolve_arguments(first, second)
    config: BatchPolicy = coerce_policy(BatchPolicy, policy, overrides)

    def decorator(fn: Operation[Any, Any]) -> BatchJobRunner[Any, Any]:
        return BatchJobRunner(fn, config, sleep=sleep)

    if op is not None:
        return decorator(op)
    return decorator


def make_batch_runner(
    first: Any = None,
    second: Any = None,
    /,
    *,
    sleep: Sleep | None = None,
    **overrides: Any,
) -> Any:
    """Wrap an async operation so it runs over a list of inputs in batches.

    Takes the same arguments as make_batch_job_runner.

    Returns:
        A BatchRunner, or a decorator producing one
    """
    op, policy = resolve_arguments(first, second)
    config: BatchPolicy = coerce_policy(BatchPolicy, policy, overrides)

    def decorator(fn: Operation[Any, Any]) -> BatchRunner[Any, Any]:
        return BatchRunner(fn, config, sleep=sleep)

    if op is not None:
        return decorator(op)
    return decorator
