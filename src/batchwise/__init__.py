"""
batchwise - retry and batching wrappers for async operations.

Wrap a single-argument coroutine function with exponential backoff,
or run it over many inputs in fixed-size concurrent batches, with or
without resumable progress snapshots.
"""

__version__ = "0.1.0"
__app_name__ = "batchwise"

from batchwise.core import (
    BatchJob,
    BatchJobRunner,
    BatchPolicy,
    BatchRunner,
    BatchwiseError,
    RetryPolicy,
    RetryRunner,
    SoftFailRunner,
    UsageError,
    make_batch_job_runner,
    make_batch_runner,
    make_retry_runner,
    make_soft_fail_runner,
)

__all__ = [
    "BatchJob",
    "BatchJobRunner",
    "BatchPolicy",
    "BatchRunner",
    "BatchwiseError",
    "RetryPolicy",
    "RetryRunner",
    "SoftFailRunner",
    "UsageError",
    "make_batch_job_runner",
    "make_batch_runner",
    "make_retry_runner",
    "make_soft_fail_runner",
]
