#!/usr/bin/env python3
"""
Unit tests for the loguru-backed logger service and message formatting.
"""

import pytest
from loguru import logger

from upload_server.enums import LogEmoji, LoggerName, LogLevel, LogSource
from upload_server.services.logger import (
    LoggerService,
    get_service_logger,
    initialize_global_logger,
)
from upload_server.services.logger.formatters import LogMessageFormatter


@pytest.fixture
def captured():
    """Route loguru records into a list for the duration of a test."""
    service = initialize_global_logger(level=LogLevel.DEBUG, enable_console=False)
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield service, records
    logger.remove(handler_id)
    service.shutdown()


@pytest.mark.unit
class TestLogMessageFormatter:
    def test_emoji_prefix(self):
        assert LogMessageFormatter.format_message("ready", LogEmoji.SUCCESS) == (
            f"{LogEmoji.SUCCESS.value} ready"
        )
        assert LogMessageFormatter.format_message("ready") == "ready"

    def test_secrets_are_redacted(self):
        sanitized = LogMessageFormatter.sanitize_context(
            {"Authorization": "Bearer abc", "nested": {"token": "abc"}, "user": 7}
        )

        assert sanitized == {"Authorization": "***", "nested": {"token": "***"}, "user": 7}

    def test_long_values_are_truncated(self):
        sanitized = LogMessageFormatter.sanitize_context({"stderr": "x" * 1000})

        assert len(sanitized["stderr"]) == 500
        assert sanitized["stderr"].endswith("...")

    def test_context_preview_is_limited(self):
        preview = LogMessageFormatter.format_context_preview(
            {"a": 1, "b": 2, "c": 3, "d": 4}
        )

        assert "a=1" in preview and "c=3" in preview
        assert "d=4" not in preview


@pytest.mark.unit
class TestLoggerService:
    def test_binds_source_and_logger_name(self, captured):
        service, records = captured

        service.info(
            "stored",
            extra_context={"filesize": 10},
            source=LogSource.STORAGE,
            logger_name=LoggerName.STORAGE_SERVICE,
        )

        record = records[-1]
        assert record["level"].name == "INFO"
        assert record["extra"]["source"] == LogSource.STORAGE.value
        assert record["extra"]["logger_name"] == LoggerName.STORAGE_SERVICE.value
        assert record["extra"]["context"] == {"filesize": 10}

    def test_warning_appends_context_preview(self, captured):
        service, records = captured

        service.warning("slow", extra_context={"duration": 31})

        assert "duration=31" in records[-1]["message"]

    def test_error_carries_exception(self, captured):
        service, records = captured

        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            service.error("failed", exception=e)

        assert records[-1]["exception"] is not None

    def test_level_filter(self):
        service = LoggerService(level=LogLevel.WARNING, enable_console=False)
        status = service.get_handler_status()
        service.shutdown()

        assert status["level"] == "WARNING"
        assert status["handlers"] == 0

    def test_file_sink(self, temp_dir):
        log_file = temp_dir / "upload-server.log"
        service = LoggerService(
            level=LogLevel.INFO, log_file=str(log_file), enable_console=False
        )

        service.info("written to file")
        service.shutdown()

        assert "written to file" in log_file.read_text()


@pytest.mark.unit
class TestServiceLogger:
    def test_default_emoji_applies(self, captured):
        _, records = captured
        service_logger = get_service_logger(
            LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.VIDEO
        )

        service_logger.info("gif ready")

        assert records[-1]["message"].startswith(LogEmoji.VIDEO.value)

    def test_call_emoji_overrides_default(self, captured):
        _, records = captured
        service_logger = get_service_logger(
            LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.VIDEO
        )

        service_logger.warning("degraded", emoji=LogEmoji.WARNING)

        assert records[-1]["message"].startswith(LogEmoji.WARNING.value)
