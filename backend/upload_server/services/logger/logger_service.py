"""
Centralized Logger Service for the upload server.

This service provides a unified logging interface on top of loguru:
- Console output with emoji support
- Optional file logging with rotation
- Per-call source, logger name and context binding

Architecture:
- Type-safe enum-based configuration
- One global instance configured at startup
- Service loggers created with get_service_logger()
"""

import sys
from typing import Any, Dict, Optional

from loguru import logger

from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .constants import (
    CONSOLE_FORMAT,
    FALLBACK_LOG_SOURCE,
    FALLBACK_LOGGER_NAME,
    LOG_FILE_COMPRESSION,
    LOG_FILE_RETENTION,
    LOG_FILE_ROTATION,
)
from .formatters import LogMessageFormatter


class LoggerService:
    """
    Centralized logging service used by every component of the upload server.

    Features:
    - Type-safe enum-based logging methods
    - Console and rotating file sinks
    - Context sanitization before anything reaches a sink

    Usage:
        log = LoggerService(level=LogLevel.INFO)

        log.info(
            "📥 POST /api/v1/upload",
            extra_context={"method": "POST"},
            source=LogSource.API,
            logger_name=LoggerName.REQUEST_LOGGER,
        )
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        log_file: Optional[str] = None,
        enable_console: bool = True,
    ):
        """
        Initialize the logger service and install its loguru sinks.

        Args:
            level: Minimum level written to every sink
            log_file: Optional path of a rotating log file
            enable_console: Enable the stderr console sink
        """
        self.level = level
        self.log_file = log_file
        self.enable_console = enable_console
        self.formatter = LogMessageFormatter()
        self._handler_ids = []

        self._initialize_handlers()

    def _initialize_handlers(self) -> None:
        logger.remove()
        logger.configure(
            extra={
                "source": FALLBACK_LOG_SOURCE,
                "logger_name": FALLBACK_LOGGER_NAME,
                "correlation_id": None,
                "context": {},
            }
        )

        if self.enable_console:
            self._handler_ids.append(
                logger.add(
                    sys.stderr,
                    level=self.level.value,
                    format=CONSOLE_FORMAT,
                    colorize=True,
                    backtrace=False,
                    diagnose=False,
                )
            )

        if self.log_file:
            self._handler_ids.append(
                logger.add(
                    self.log_file,
                    level=self.level.value,
                    rotation=LOG_FILE_ROTATION,
                    retention=LOG_FILE_RETENTION,
                    compression=LOG_FILE_COMPRESSION,
                    serialize=True,
                    enqueue=True,
                )
            )

    def _log_entry(
        self,
        level: LogLevel,
        message: str,
        *,
        exception: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
        source: LogSource = LogSource.SYSTEM,
        logger_name: LoggerName = LoggerName.SYSTEM,
        emoji: Optional[LogEmoji] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        sanitized = self.formatter.sanitize_context(context)
        formatted = self.formatter.format_message(message, emoji)
        if sanitized and level in (LogLevel.ERROR, LogLevel.WARNING):
            formatted += self.formatter.format_context_preview(sanitized)

        bound = logger.bind(
            source=source.value,
            logger_name=logger_name.value,
            correlation_id=correlation_id,
            context=sanitized,
        )
        if exception is not None:
            bound = bound.opt(exception=exception)
        bound.log(level.value, formatted)

    # ====================================================================
    # PUBLIC LOGGING METHODS
    # ====================================================================

    def error(
        self,
        message: str,
        *,
        exception: Optional[BaseException] = None,
        error_context: Optional[Dict[str, Any]] = None,
        source: LogSource = LogSource.SYSTEM,
        logger_name: LoggerName = LoggerName.ERROR_HANDLER,
        emoji: Optional[LogEmoji] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._log_entry(
            LogLevel.ERROR,
            message,
            exception=exception,
            context=error_context,
            source=source,
            logger_name=logger_name,
            emoji=emoji,
            correlation_id=correlation_id,
        )

    def warning(
        self,
        message: str,
        *,
        extra_context: Optional[Dict[str, Any]] = None,
        source: LogSource = LogSource.SYSTEM,
        logger_name: LoggerName = LoggerName.SYSTEM,
        emoji: Optional[LogEmoji] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._log_entry(
            LogLevel.WARNING,
            message,
            context=extra_context,
            source=source,
            logger_name=logger_name,
            emoji=emoji,
            correlation_id=correlation_id,
        )

    def info(
        self,
        message: str,
        *,
        extra_context: Optional[Dict[str, Any]] = None,
        source: LogSource = LogSource.SYSTEM,
        logger_name: LoggerName = LoggerName.SYSTEM,
        emoji: Optional[LogEmoji] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._log_entry(
            LogLevel.INFO,
            message,
            context=extra_context,
            source=source,
            logger_name=logger_name,
            emoji=emoji,
            correlation_id=correlation_id,
        )

    def debug(
        self,
        message: str,
        *,
        extra_context: Optional[Dict[str, Any]] = None,
        source: LogSource = LogSource.SYSTEM,
        logger_name: LoggerName = LoggerName.SYSTEM,
        emoji: Optional[LogEmoji] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._log_entry(
            LogLevel.DEBUG,
            message,
            context=extra_context,
            source=source,
            logger_name=logger_name,
            emoji=emoji,
            correlation_id=correlation_id,
        )

    def get_handler_status(self) -> Dict[str, Any]:
        return {
            "console": self.enable_console,
            "file": self.log_file,
            "level": self.level.value,
            "handlers": len(self._handler_ids),
        }

    def shutdown(self) -> None:
        """Flush and detach every sink this service installed."""
        for handler_id in self._handler_ids:
            try:
                logger.remove(handler_id)
            except ValueError:
                # Already removed by a later re-initialization
                pass
        self._handler_ids = []


# Global logger instance
_global_logger_instance: Optional[LoggerService] = None


def initialize_global_logger(
    level: LogLevel = LogLevel.INFO,
    log_file: Optional[str] = None,
    enable_console: bool = True,
) -> LoggerService:
    """
    Initialize the global logger instance.

    This should be called once during application startup. Calling it
    again replaces the sinks of the previous instance.

    Returns:
        Initialized LoggerService instance
    """
    global _global_logger_instance

    if _global_logger_instance is not None:
        _global_logger_instance.shutdown()

    _global_logger_instance = LoggerService(
        level=level, log_file=log_file, enable_console=enable_console
    )
    return _global_logger_instance


def log() -> LoggerService:
    """
    Get the global logger instance.

    Falls back to a console-only instance when startup has not configured
    one yet, which is the case for code exercised outside the application.
    """
    global _global_logger_instance

    if _global_logger_instance is None:
        _global_logger_instance = LoggerService()

    return _global_logger_instance


def get_service_logger(
    logger_name: LoggerName,
    source: LogSource = LogSource.SYSTEM,
    default_emoji: Optional[LogEmoji] = None,
):
    """
    Factory function to create a pre-configured logger for a specific service.

    Emoji priority system (highest to lowest):
    1. Direct: Emoji passed directly to log method call
    2. Instance-set: Default emoji set when creating the service logger
    3. Fallback: Default emoji based on log level

    Args:
        logger_name: The logger name enum to use for all calls
        source: The log source enum to use for all calls (defaults to SYSTEM)
        default_emoji: Instance-level default emoji that overrides level-based fallbacks

    Returns:
        ServiceLogger instance with error, warning, info, debug methods

    Example:
        logger = get_service_logger(LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE)
        logger.error("Probe failed", exception=e)
        logger.info("GIF ready", emoji=LogEmoji.VIDEO)
    """

    def _resolve_emoji(
        method_emoji: Optional[LogEmoji], fallback_emoji: LogEmoji
    ) -> LogEmoji:
        if method_emoji is not None:
            return method_emoji
        if default_emoji is not None:
            return default_emoji
        return fallback_emoji

    class ServiceLogger:
        @staticmethod
        def error(
            message: str,
            exception: Optional[BaseException] = None,
            error_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            correlation_id: Optional[str] = None,
        ):
            return log().error(
                message,
                exception=exception,
                error_context=error_context,
                source=source,
                logger_name=logger_name,
                emoji=_resolve_emoji(emoji, LogEmoji.ERROR),
                correlation_id=correlation_id,
            )

        @staticmethod
        def warning(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            correlation_id: Optional[str] = None,
        ):
            return log().warning(
                message,
                extra_context=extra_context,
                source=source,
                logger_name=logger_name,
                emoji=_resolve_emoji(emoji, LogEmoji.WARNING),
                correlation_id=correlation_id,
            )

        @staticmethod
        def info(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            correlation_id: Optional[str] = None,
        ):
            return log().info(
                message,
                extra_context=extra_context,
                source=source,
                logger_name=logger_name,
                emoji=_resolve_emoji(emoji, LogEmoji.INFO),
                correlation_id=correlation_id,
            )

        @staticmethod
        def debug(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            correlation_id: Optional[str] = None,
        ):
            return log().debug(
                message,
                extra_context=extra_context,
                source=source,
                logger_name=logger_name,
                emoji=_resolve_emoji(emoji, LogEmoji.DEBUG),
                correlation_id=correlation_id,
            )

    return ServiceLogger()
