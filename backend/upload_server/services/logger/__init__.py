"""
Centralized Logger Service Module.

Usage:
    from upload_server.services.logger import get_service_logger
    from upload_server.enums import LoggerName, LogSource

    logger = get_service_logger(LoggerName.STORAGE_SERVICE, LogSource.STORAGE)
    logger.info("Stored upload", extra_context={"filename": name})
"""

# Re-export commonly used enums for convenience
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .formatters import LogMessageFormatter
from .logger_service import (
    LoggerService,
    get_service_logger,
    initialize_global_logger,
    log,
)

__all__ = [
    "LoggerService",
    "log",
    "get_service_logger",
    "initialize_global_logger",
    "LogMessageFormatter",
    # Enums
    "LogLevel",
    "LogSource",
    "LoggerName",
    "LogEmoji",
]
