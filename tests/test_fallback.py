"""Tests for the soft-fail wrapper."""

import logging

import pytest

from batchwise import BatchPolicy, BatchRunner, SoftFailRunner, make_soft_fail_runner


async def parse_int(text):
    return int(text)


class TestSoftFailRunner:
    """Tests for SoftFailRunner."""

    @pytest.mark.asyncio
    async def test_success_passes_through(self) -> None:
        runner = SoftFailRunner(parse_int, -1)
        assert await runner("7") == 7

    @pytest.mark.asyncio
    async def test_value_fallback(self) -> None:
        runner = SoftFailRunner(parse_int, -1)
        assert await runner("seven") == -1

    @pytest.mark.asyncio
    async def test_callable_fallback_receives_error(self) -> None:
        runner = SoftFailRunner(parse_int, lambda e: type(e).__name__)
        assert await runner("seven") == "ValueError"

    @pytest.mark.asyncio
    async def test_async_fallback_is_awaited(self) -> None:
        async def recover(error):
            return str(error)

        runner = SoftFailRunner(parse_int, recover)
        assert "invalid literal" in await runner("seven")

    @pytest.mark.asyncio
    async def test_uncaught_errors_propagate(self) -> None:
        runner = SoftFailRunner(parse_int, 0, catch=(TypeError,))
        with pytest.raises(ValueError):
            await runner("seven")

    @pytest.mark.asyncio
    async def test_logs_failure(self, caplog) -> None:
        caplog.set_level(logging.WARNING, logger="batchwise")
        await SoftFailRunner(parse_int, 0)("seven")

        records = [r for r in caplog.records if r.name == "batchwise.fallback"]
        assert len(records) == 1
        assert records[0].runner == "soft-fail"
        assert records[0].operation == "parse_int"

    @pytest.mark.asyncio
    async def test_keeps_batch_alive(self) -> None:
        """One bad input no longer aborts the whole batch."""
        run = BatchRunner(
            SoftFailRunner(parse_int, None),
            BatchPolicy(batch_size=2, batch_delay_ms=0),
        )
        assert await run(["1", "x", "3"]) == [1, None, 3]


class TestMakeSoftFailRunner:
    """Tests for the factory."""

    @pytest.mark.asyncio
    async def test_fallback_and_operation(self) -> None:
        runner = make_soft_fail_runner(0, parse_int)
        assert isinstance(runner, SoftFailRunner)
        assert await runner("x") == 0

    @pytest.mark.asyncio
    async def test_curried_with_callable_fallback(self) -> None:
        runner = make_soft_fail_runner(lambda e: "bad")(parse_int)
        assert await runner("x") == "bad"

    @pytest.mark.asyncio
    async def test_decorator_with_catch(self) -> None:
        @make_soft_fail_runner(None, catch=(KeyError,))
        async def lookup(key):
            return {"a": 1}[key]

        assert await lookup("a") == 1
        assert await lookup("b") is None

    @pytest.mark.asyncio
    async def test_empty_catch_replaces_nothing(self) -> None:
        runner = make_soft_fail_runner(0, parse_int, catch=())
        with pytest.raises(ValueError):
            await runner("x")
