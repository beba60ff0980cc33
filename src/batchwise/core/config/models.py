"""
Pydantic configuration models for batchwise.

These models provide type-safe configuration with validation for:
- Retry policies (attempt cap, backoff curve, jitter)
- Batch policies (batch size, inter-batch delay)
- Logging settings
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Retry Policy
# =============================================================================


class RetryPolicy(BaseModel):
    """Retry and backoff settings for a wrapped operation.

    With the defaults the delays between attempts are (in ms):
    250, 2000, 6750, 16000, 31250.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(
        default=6,
        ge=1,
        description="Maximum attempts, including the initial try",
    )
    initial_delay_ms: float = Field(
        default=250,
        ge=0,
        description="Delay after the first failure in milliseconds",
    )
    backoff_exponent: float = Field(
        default=3.0,
        ge=0,
        description="Power applied to the failure count",
    )
    max_delay_ms: float = Field(
        default=300_000,
        ge=0,
        description="Upper limit on any single delay in milliseconds",
    )
    jitter_fraction: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Largest fraction of the delay removed at random",
    )

    def delay_for(self, failures: int) -> float:
        """Get the capped delay in ms after ``failures`` failed attempts, before jitter."""
        if failures < 1:
            raise ValueError("failures must be >= 1")
        if self.initial_delay_ms == 0:
            return 0
        try:
            delay = self.initial_delay_ms * failures ** self.backoff_exponent
        except OverflowError:
            # Larger than any float, so the ceiling applies
            return self.max_delay_ms
        return min(self.max_delay_ms, delay)

    def schedule(self) -> list[float]:
        """Get the un-jittered delay before every retry."""
        return [self.delay_for(n) for n in range(1, self.max_attempts)]


# =============================================================================
# Batch Policy
# =============================================================================


class BatchPolicy(BaseModel):
    """Batching settings for a wrapped operation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    batch_size: int = Field(
        default=4,
        ge=1,
        description="Number of concurrent calls per batch",
    )
    batch_delay_ms: float = Field(
        default=150,
        ge=0,
        description="Delay before every batch after the first, in milliseconds",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class PolicyProfile(BaseModel):
    """A named pair of retry and batch policies."""

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    batch: BatchPolicy = Field(default_factory=BatchPolicy)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Log level for the batchwise logger",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file to write log records to",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def level_is_known(cls, v: str) -> str:
        """Normalise and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class AppConfig(BaseModel):
    """Top-level configuration file contents."""

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    batch: BatchPolicy = Field(default_factory=BatchPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    policies: dict[str, PolicyProfile] = Field(
        default_factory=dict,
        description="Named policy profiles",
    )

    def profile(self, name: str | None = None) -> PolicyProfile:
        """Get a named profile, or the top-level policies when name is None."""
        if name is None:
            return PolicyProfile(retry=self.retry, batch=self.batch)
        try:
            return self.policies[name]
        except KeyError:
            raise KeyError(f"Unknown policy profile: {name}") from None


def coerce_policy(
    model: type[BaseModel],
    policy: BaseModel | dict[str, Any] | None,
    overrides: dict[str, Any],
) -> Any:
    """Build a validated policy from an instance, a mapping, and keyword overrides."""
    if policy is None:
        data: dict[str, Any] = {}
    elif isinstance(policy, model):
        data = policy.model_dump()
    elif isinstance(policy, dict):
        data = dict(policy)
    else:
        raise TypeError(
            f"Expected {model.__name__} or dict, got {type(policy).__name__}"
        )
    data.update(overrides)
    return model.model_validate(data)
