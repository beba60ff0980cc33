"""Batching - bounded concurrent runs with resumable progress."""

from .base import BatchJob
from .runner import (
    BatchJobRunner,
    BatchRunner,
    make_batch_job_runner,
    make_batch_runner,
)

__all__ = [
    "BatchJob",
    "BatchJobRunner",
    "BatchRunner",
    "make_batch_job_runner",
    "make_batch_runner",
]
