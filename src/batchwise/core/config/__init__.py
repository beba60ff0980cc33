"""Configuration loading and validation."""

from .models import (
    AppConfig,
    BatchPolicy,
    LoggingConfig,
    PolicyProfile,
    RetryPolicy,
)
from .loader import ConfigError, load_app_config, validate_config_file

__all__ = [
    # Config models
    "AppConfig",
    "BatchPolicy",
    "LoggingConfig",
    "PolicyProfile",
    "RetryPolicy",
    # Loaders
    "ConfigError",
    "load_app_config",
    "validate_config_file",
]
