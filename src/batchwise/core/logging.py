"""
Logging infrastructure for batchwise.

Provides:
- Structured JSON logging for file output
- Rich console output for terminal
- Contextual logging with runner/operation context

The library only creates loggers; nothing is configured until the
application calls setup_logging().
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson
from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console

    from batchwise.core.config.models import LoggingConfig


ROOT_LOGGER = "batchwise"

CONTEXT_FIELDS = ("runner", "operation", "attempt", "delay_ms", "batch_size")


def json_dumps(obj: Any) -> str:
    return orjson.dumps(obj, default=str).decode("utf-8")


# =============================================================================
# JSON Formatter for File Logging
# =============================================================================


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json_dumps(log_data)


# =============================================================================
# Rich Console Handler
# =============================================================================


class RichConsoleHandler(logging.Handler):
    """Handler that outputs to Rich console with formatting."""

    def __init__(self, console: "Console | None" = None, level: int = logging.INFO):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)

            style = {
                logging.DEBUG: "dim",
                logging.INFO: "default",
                logging.WARNING: "yellow",
                logging.ERROR: "red",
                logging.CRITICAL: "bold red",
            }.get(record.levelno, "default")

            prefix = ""
            if hasattr(record, "runner"):
                prefix = f"[cyan]{escape(f'[{record.runner}]')}[/cyan] "

            self.console.print(f"{prefix}[{style}]{escape(message)}[/{style}]", highlight=False)

            if record.exc_info:
                self.console.print_exception()

        except Exception:
            self.handleError(record)


# =============================================================================
# Logger Configuration
# =============================================================================


PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _console_handler(rich_console: bool) -> logging.Handler:
    if rich_console:
        handler: logging.Handler = RichConsoleHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def _file_handler(log_file: Path | str) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    rich_console: bool = True,
) -> logging.Logger:
    """Set up logging for batchwise.

    Records go to stderr, and also to ``log_file`` as JSON lines when
    a file is given. Calling it again replaces the earlier handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to a JSON-lines log file (optional)
        rich_console: Use Rich for console output

    Returns:
        Root logger for batchwise
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    logger.addHandler(_console_handler(rich_console))
    if log_file:
        logger.addHandler(_file_handler(log_file))

    return logger


def setup_logging_from_config(config: "LoggingConfig") -> logging.Logger:
    """Set up logging from a LoggingConfig section."""
    return setup_logging(
        level=config.level,
        log_file=config.log_file,
        rich_console=config.rich_console,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (will be prefixed with 'batchwise.')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)


# =============================================================================
# Contextual Logging Adapter
# =============================================================================


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that adds runner and operation names to log records."""

    def __init__(
        self,
        logger: logging.Logger,
        runner: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(logger, {})
        self.runner = runner
        self.operation = operation

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})

        if self.runner:
            extra["runner"] = self.runner
        if self.operation:
            extra["operation"] = self.operation

        kwargs["extra"] = extra
        return msg, kwargs


def get_contextual_logger(
    name: str | None = None,
    runner: str | None = None,
    operation: str | None = None,
) -> ContextualLogger:
    """Get a contextual logger with runner/operation context."""
    return ContextualLogger(get_logger(name), runner=runner, operation=operation)


def describe_operation(op: Any) -> str:
    """Best-effort readable name for a wrapped callable."""
    name = getattr(op, "__qualname__", None) or getattr(op, "__name__", None)
    if name:
        return name
    return type(op).__name__
