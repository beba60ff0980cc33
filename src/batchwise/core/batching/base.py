"""
Batch job data structures.

A BatchJob is an immutable snapshot of a batched run: the inputs still
waiting, the outputs produced so far, and whether the run has drained.
Each runner step consumes one snapshot and returns a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, Iterable, Sequence

from batchwise.core.errors import UsageError
from batchwise.core.wrapping import P, R


@dataclass(frozen=True)
class BatchJob(Generic[P, R]):
    """Resumable state of a batched run.

    Attributes:
        pending: Inputs awaiting processing, in submission order
        completed: Outputs produced so far, in submission order
        batched: Items processed by the most recent step
        in_progress: None for a fresh job, then True until pending drains
    """

    pending: tuple[P, ...] = field(default_factory=tuple)
    completed: tuple[R, ...] = field(default_factory=tuple)
    batched: int = 0
    in_progress: bool | None = None

    def __post_init__(self) -> None:
        # Copy whatever sequences the caller handed us
        object.__setattr__(self, "pending", _freeze(self.pending, "pending"))
        object.__setattr__(self, "completed", _freeze(self.completed, "completed"))
        if self.batched < 0:
            raise ValueError("batched must be >= 0")

    @classmethod
    def from_inputs(cls, inputs: Iterable[P]) -> "BatchJob[P, R]":
        """Create a fresh job for a sequence of inputs."""
        return cls(pending=_freeze(inputs, "inputs"))

    @property
    def total(self) -> int:
        """Number of inputs submitted over the job's lifetime."""
        return len(self.completed) + len(self.pending)

    @property
    def done(self) -> bool:
        """Check if there is nothing left to process."""
        return not self.pending

    @property
    def started(self) -> bool:
        """Check if at least one batch has produced results."""
        return len(self.completed) > 0

    def ensure_runnable(self) -> None:
        """Raise UsageError if the job was already marked complete."""
        if self.in_progress is False:
            raise UsageError("job already completed")

    def advance(self, consumed: int, results: Sequence[R]) -> "BatchJob[P, R]":
        """Return the snapshot after ``consumed`` pending items produced ``results``."""
        if consumed != len(results):
            raise ValueError(
                f"Batch produced {len(results)} results for {consumed} inputs"
            )
        remaining = self.pending[consumed:]
        return replace(
            self,
            pending=remaining,
            completed=self.completed + tuple(results),
            batched=consumed,
            in_progress=len(remaining) > 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pending": list(self.pending),
            "completed": list(self.completed),
            "batched": self.batched,
            "in_progress": self.in_progress,
        }


def _freeze(items: Iterable[Any], what: str) -> tuple[Any, ...]:
    if isinstance(items, (str, bytes)):
        raise TypeError(f"{what} must be a sequence of items, not {type(items).__name__}")
    return tuple(items)


def as_job(job: BatchJob[P, R] | Iterable[P]) -> BatchJob[P, R]:
    """Accept either a BatchJob or a plain sequence of inputs."""
    if isinstance(job, BatchJob):
        return job
    return BatchJob.from_inputs(job)
