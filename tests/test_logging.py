"""Tests for logging setup and formatters."""

import io
import logging

import orjson
from rich.console import Console

from batchwise.core.config import LoggingConfig
from batchwise.core.logging import (
    JSONFormatter,
    RichConsoleHandler,
    describe_operation,
    get_contextual_logger,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="batchwise.retries",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="fetch failed, retrying in %dms",
        args=(250,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self) -> None:
        data = orjson.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "WARNING"
        assert data["logger"] == "batchwise.retries"
        assert data["message"] == "fetch failed, retrying in 250ms"
        assert "timestamp" in data

    def test_context_fields(self) -> None:
        record = make_record(runner="retry", operation="fetch", attempt=1, delay_ms=250)
        data = orjson.loads(JSONFormatter().format(record))
        assert data["runner"] == "retry"
        assert data["operation"] == "fetch"
        assert data["attempt"] == 1
        assert data["delay_ms"] == 250
        assert "batch_size" not in data


class TestRichConsoleHandler:
    """Tests for RichConsoleHandler."""

    def test_prints_runner_prefix(self) -> None:
        buffer = io.StringIO()
        console = Console(file=buffer, width=200, color_system=None)
        handler = RichConsoleHandler(console, level=logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(message)s"))

        handler.emit(make_record(runner="retry"))

        assert buffer.getvalue().strip() == "[retry] fetch failed, retrying in 250ms"

    def test_brackets_in_message_are_literal(self) -> None:
        buffer = io.StringIO()
        handler = RichConsoleHandler(Console(file=buffer, width=200, color_system=None))
        handler.setFormatter(logging.Formatter("%(message)s"))

        record = make_record()
        record.msg, record.args = "bad items [1, 2] [bold]", None
        handler.emit(record)

        assert buffer.getvalue().strip() == "bad items [1, 2] [bold]"


class TestLoggers:
    """Tests for logger helpers and setup."""

    def test_get_logger_names(self) -> None:
        assert get_logger().name == "batchwise"
        assert get_logger("batching").name == "batchwise.batching"

    def test_contextual_logger_adds_extra(self, caplog) -> None:
        caplog.set_level(logging.INFO, logger="batchwise")
        log = get_contextual_logger("batching", runner="batch", operation="fetch")

        log.info("hello", extra={"batch_size": 3})

        record = caplog.records[-1]
        assert record.runner == "batch"
        assert record.operation == "fetch"
        assert record.batch_size == 3

    def test_setup_writes_json_file(self, tmp_path, clean_batchwise_logger) -> None:
        log_file = tmp_path / "logs" / "batchwise.jsonl"
        logger = setup_logging(level="debug", log_file=log_file, rich_console=False)

        get_contextual_logger("batching", runner="batch").debug("Batch complete")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        data = orjson.loads(lines[-1])
        assert data["message"] == "Batch complete"
        assert data["runner"] == "batch"
        assert logger.level == logging.DEBUG

    def test_setup_replaces_handlers(self, clean_batchwise_logger) -> None:
        setup_logging(rich_console=False)
        logger = setup_logging(rich_console=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichConsoleHandler)

    def test_setup_plain_console(self, clean_batchwise_logger) -> None:
        logger = setup_logging(rich_console=False)
        [handler] = logger.handlers
        assert type(handler) is logging.StreamHandler
        assert "%(levelname)s" in handler.formatter._fmt

    def test_setup_from_config(self, tmp_path, clean_batchwise_logger) -> None:
        log_file = tmp_path / "out.log"
        config = LoggingConfig(level="warning", log_file=log_file)
        logger = setup_logging_from_config(config)
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2

        get_logger("retries").warning("fetch gave up")
        for handler in logger.handlers:
            handler.flush()

        data = orjson.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "fetch gave up"
        assert data["level"] == "WARNING"


class TestDescribeOperation:
    """Tests for describe_operation."""

    def test_function(self) -> None:
        async def fetch(_):
            return None

        assert describe_operation(fetch).endswith("fetch")

    def test_callable_object(self) -> None:
        class Fetcher:
            async def __call__(self, _):
                return None

        assert describe_operation(Fetcher()) == "Fetcher"
