"""
Shared test fixtures.

Provides: a fake clock whose sleep records requested waits instead of
blocking, and helpers for building flaky operations.
"""

import logging

import pytest


class FakeClock:
    """Virtual clock; ``sleep`` advances time without waiting."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(float(seconds))
        self.now += float(seconds)

    @property
    def sleeps_ms(self) -> list[float]:
        return [s * 1000.0 for s in self.sleeps]


class Flaky:
    """Async operation that fails a fixed number of times, then doubles its input."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls: list[object] = []
        self.errors: list[Exception] = []

    async def __call__(self, arg):
        self.calls.append(arg)
        if len(self.errors) < self.failures:
            error = RuntimeError(f"failure {len(self.errors) + 1}")
            self.errors.append(error)
            raise error
        return arg * 2


@pytest.fixture
def clock() -> FakeClock:
    """Create a fresh fake clock."""
    return FakeClock()


@pytest.fixture
def flaky():
    """Factory for Flaky operations."""
    return Flaky


@pytest.fixture
def clean_batchwise_logger():
    """Restore the batchwise logger after tests that configure it."""
    logger = logging.getLogger("batchwise")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
