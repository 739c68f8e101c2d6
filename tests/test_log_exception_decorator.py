"""
Tests for the log_exception decorator and logging setup.

Tests cover:
- Exception logging and swallowing for sync and async functions
- Argument binding and prefix substitution
- Log level selection
- Handler installation by setup_logging
"""

import asyncio
import logging
import logging.handlers

import pytest

from factorio_bridge.logger import log_exception, logger, setup_logging


class TestBasicExceptionLogging:
    """Test basic exception logging functionality."""

    def test_sync_function_with_prefix(self, caplog):
        @log_exception("SyncOperation")
        def sync_func_with_error():
            raise ValueError("Test error from sync function")

        assert sync_func_with_error() is None
        assert "SyncOperation: ValueError: Test error from sync function" in caplog.text
        assert "ERROR" in caplog.text

    @pytest.mark.asyncio
    async def test_async_function_with_prefix(self, caplog):
        @log_exception("AsyncOperation")
        async def async_func_with_error():
            await asyncio.sleep(0)
            raise ValueError("Test error from async function")

        assert await async_func_with_error() is None
        assert "AsyncOperation: ValueError: Test error from async function" in caplog.text

    @pytest.mark.asyncio
    async def test_success_passes_through(self, caplog):
        @log_exception("Never logged")
        async def ok(value: int) -> int:
            return value * 2

        assert await ok(21) == 42
        assert "Never logged" not in caplog.text

    def test_default_return(self):
        @log_exception(default_return="fallback")
        def broken() -> str:
            raise RuntimeError("boom")

        assert broken() == "fallback"

    @pytest.mark.asyncio
    async def test_cancellation_is_not_swallowed(self):
        @log_exception("Cancelled")
        async def sleeper():
            await asyncio.sleep(10)

        task = asyncio.create_task(sleeper())
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestArgumentFormatting:
    """Test parameter binding in log messages."""

    def test_arguments_are_named(self, caplog):
        @log_exception("Failed")
        def send(command: str, retries: int = 0):
            raise ConnectionError("refused")

        send("/time")

        assert "[command='/time', retries=0] Failed: ConnectionError: refused" in caplog.text

    def test_self_is_omitted(self, caplog):
        class Sink:
            @log_exception("Failed to send")
            def send(self, text: str):
                raise OSError("down")

        Sink().send("hello")

        assert "[text='hello'] Failed to send: OSError: down" in caplog.text

    def test_prefix_substitution(self, caplog):
        @log_exception("Failed to run {command!r}")
        def run(command: str):
            raise ValueError("bad")

        run("/players")

        assert "Failed to run '/players': ValueError: bad" in caplog.text

    def test_prefix_with_unknown_placeholder(self, caplog):
        @log_exception("Failed for {missing}")
        def run(command: str):
            raise ValueError("bad")

        run("/players")

        assert "Failed to format prefix" in caplog.text
        assert "Failed for {missing}: ValueError: bad" in caplog.text


class TestLogLevel:
    def test_warning_level(self, caplog):
        @log_exception("Soft failure", level=logging.WARNING)
        def soft():
            raise ValueError("meh")

        soft()

        records = [r for r in caplog.records if "Soft failure" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].exc_info is not None


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        handlers, level = list(logger.handlers), logger.level
        yield
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)

    def test_stdout_only(self):
        setup_logging("warning")

        assert logger.level == logging.WARNING
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_with_log_dir(self, tmp_path):
        logs_dir = tmp_path / "logs"

        setup_logging("DEBUG", logs_dir)
        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert logs_dir.is_dir()
        file_handlers = [
            h
            for h in logger.handlers
            if isinstance(h, logging.handlers.TimedRotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert "written to file" in (logs_dir / "factorio-bridge.log").read_text()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        setup_logging()

        assert len(logger.handlers) == 1
