"""
Middleware package for FastAPI application.

Provides centralized error handling, request logging, and rate limiting.
"""

from .error_handler import (
    ErrorHandlerMiddleware,
    http_exception_handler,
    upload_server_error_handler,
    validation_exception_handler,
)
from .rate_limit_middleware import RateLimitMiddleware
from .request_logger import RequestLoggerMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestLoggerMiddleware",
    "RateLimitMiddleware",
    "http_exception_handler",
    "upload_server_error_handler",
    "validation_exception_handler",
]
