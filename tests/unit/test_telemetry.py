"""Unit tests for telemetry module."""

import asyncio
import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from src.commons.telemetry.decorators import LogContext, log_exceptions, timed
from src.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    set_correlation_id,
    set_log_context,
)


def _record(msg="Test", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/test/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID management."""

    def test_set_and_get_correlation_id(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate_correlation_id(self):
        cid = set_correlation_id()
        assert cid is not None
        assert len(cid) == 36  # UUID format

    def test_correlation_id_isolation(self):
        """Test that correlation IDs are isolated per context."""
        set_correlation_id("main-context")

        async def async_task():
            set_correlation_id("async-context")
            return get_correlation_id()

        result = asyncio.run(async_task())
        assert result == "async-context"
        assert get_correlation_id() == "main-context"


class TestLogContext:
    """Tests for logging context management."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_set_and_get_context(self):
        set_log_context(video_id="abc", operation="publish")
        ctx = get_log_context()
        assert ctx["video_id"] == "abc"
        assert ctx["operation"] == "publish"

    def test_clear_context(self):
        set_log_context(key="value")
        clear_log_context()
        assert get_log_context() == {}

    def test_context_is_copied(self):
        set_log_context(key="value")
        ctx = get_log_context()
        ctx["new_key"] = "new_value"
        assert "new_key" not in get_log_context()


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def setup_method(self):
        clear_log_context()

    def test_basic_format(self):
        data = json.loads(JsonFormatter().format(_record("Test message")))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["path"] == "/test/file.py:42"

    def test_path_can_be_omitted(self):
        data = json.loads(JsonFormatter(include_path=False).format(_record()))
        assert "path" not in data

    def test_service_name(self):
        data = json.loads(JsonFormatter(service="catalog").format(_record()))
        assert data["service"] == "catalog"
        assert "service" not in json.loads(JsonFormatter().format(_record()))

    def test_format_with_correlation_id(self):
        set_correlation_id("test-cid")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["correlation_id"] == "test-cid"

    def test_format_with_context(self):
        set_log_context(video_id="vid-123")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["context"]["video_id"] == "vid-123"
        clear_log_context()

    def test_extra_fields_are_included(self):
        record = _record(duration_ms=12.5, references=["a", "b"])
        data = json.loads(JsonFormatter().format(record))
        assert data["duration_ms"] == 12.5
        assert data["references"] == ["a", "b"]

    def test_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError" in data["exception"]


class TestTextFormatter:
    """Tests for text log formatter."""

    def setup_method(self):
        clear_log_context()

    def test_basic_format(self):
        output = TextFormatter(use_color=False).format(_record("Test message"))

        assert "INFO" in output
        assert "[test.logger]" in output
        assert "Test message" in output

    def test_color_codes(self):
        colored = TextFormatter(use_color=True).format(_record())
        plain = TextFormatter(use_color=False).format(_record())

        assert "\033[32m" in colored
        assert "\033[" not in plain

    def test_key_value_pairs_appended(self):
        set_log_context(operation="delete")
        output = TextFormatter().format(_record("Video deleted", video_id="v1"))
        clear_log_context()

        assert "operation=delete" in output
        assert "video_id=v1" in output


class TestConfigureLogging:
    """Tests for logger configuration."""

    def test_configure_json_logger(self):
        logger = configure_logging(
            level="DEBUG", format_type="json", logger_name="test.json"
        )
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False

    def test_configure_text_logger(self):
        logger = configure_logging(
            level="INFO", format_type="text", logger_name="test.text"
        )
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_reconfigure_replaces_handlers(self):
        configure_logging(level="INFO", logger_name="test.again")
        logger = configure_logging(level="INFO", logger_name="test.again")
        assert len(logger.handlers) == 1


class TestLogExceptionsDecorator:
    """Tests for @log_exceptions decorator."""

    def test_log_and_reraise(self):
        logger = MagicMock()

        @log_exceptions(logger=logger)
        def failing_function():
            raise RuntimeError("Test error")

        with pytest.raises(RuntimeError):
            failing_function()

        logger.log.assert_called_once()
        assert logger.log.call_args.args[0] == logging.ERROR

    def test_custom_level_and_message(self):
        logger = MagicMock()

        @log_exceptions(logger=logger, level=logging.WARNING, message="boom")
        def failing_function():
            raise RuntimeError("Test error")

        with pytest.raises(RuntimeError):
            failing_function()

        assert logger.log.call_args.args == (logging.WARNING, "boom")

    def test_async_log_exceptions(self):
        logger = MagicMock()

        @log_exceptions(logger=logger)
        async def async_failing():
            raise ValueError("Async error")

        with pytest.raises(ValueError):
            asyncio.run(async_failing())

        logger.log.assert_called_once()

    def test_no_log_on_success(self):
        logger = MagicMock()

        @log_exceptions(logger=logger)
        def ok():
            return 1

        assert ok() == 1
        logger.log.assert_not_called()


class TestTimedDecorator:
    """Tests for @timed decorator."""

    def test_timed_sync_function(self):
        logger = MagicMock()

        @timed(logger=logger)
        def work():
            return "done"

        assert work() == "done"
        logger.log.assert_called_once()
        assert "duration_ms" in logger.log.call_args.kwargs["extra"]

    def test_timed_async_function(self):
        logger = MagicMock()

        @timed(logger=logger)
        async def async_work():
            await asyncio.sleep(0)
            return "async done"

        assert asyncio.run(async_work()) == "async done"
        logger.log.assert_called_once()

    def test_timed_with_threshold(self):
        logger = MagicMock()

        @timed(logger=logger, threshold_ms=10_000)
        def fast_function():
            return "fast"

        assert fast_function() == "fast"
        logger.log.assert_not_called()

    def test_timed_reports_on_failure(self):
        logger = MagicMock()

        @timed(logger=logger)
        def failing():
            raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            failing()
        logger.log.assert_called_once()
        assert logger.log.call_args.kwargs["extra"]["outcome"] == "RuntimeError"

    def test_timed_outcome_ok(self):
        logger = MagicMock()

        @timed(logger=logger)
        def work():
            return 1

        work()
        assert logger.log.call_args.kwargs["extra"]["outcome"] == "ok"


class TestLogContextManager:
    """Tests for LogContext context manager."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_context_manager_adds_context(self):
        with LogContext(operation="update", video_id="v1"):
            ctx = get_log_context()
            assert ctx["operation"] == "update"
            assert ctx["video_id"] == "v1"

    def test_context_manager_restores_context(self):
        set_log_context(existing="value")

        with LogContext(temporary="data"):
            ctx = get_log_context()
            assert ctx["existing"] == "value"
            assert ctx["temporary"] == "data"

        ctx = get_log_context()
        assert ctx["existing"] == "value"
        assert "temporary" not in ctx

    def test_nested_context_managers(self):
        with LogContext(level1="a"):
            with LogContext(level2="b"):
                ctx = get_log_context()
                assert ctx["level1"] == "a"
                assert ctx["level2"] == "b"

            ctx = get_log_context()
            assert ctx["level1"] == "a"
            assert "level2" not in ctx
