"""Core runners - retries, batching, fallbacks."""

from .batching import (
    BatchJob,
    BatchJobRunner,
    BatchRunner,
    make_batch_job_runner,
    make_batch_runner,
)
from .config import BatchPolicy, RetryPolicy
from .errors import BatchwiseError, UsageError
from .fallback import SoftFailRunner, make_soft_fail_runner
from .retries import RetryRunner, make_retry_runner

__all__ = [
    # Retries
    "RetryRunner",
    "make_retry_runner",
    # Batching
    "BatchJob",
    "BatchJobRunner",
    "BatchRunner",
    "make_batch_job_runner",
    "make_batch_runner",
    # Fallbacks
    "SoftFailRunner",
    "make_soft_fail_runner",
    # Policies
    "BatchPolicy",
    "RetryPolicy",
    # Errors
    "BatchwiseError",
    "UsageError",
]
