# backend/upload_server/middleware/request_logger.py
"""
Request logging middleware for FastAPI application.

Logs each request's start, completion and failure with timing and the
correlation ID, never including credentials.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..config import settings
from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import get_service_logger
from .error_handler import SENSITIVE_HEADERS, get_correlation_id

logger = get_service_logger(LoggerName.REQUEST_LOGGER, LogSource.API)

# Uploads of large videos legitimately take a while
SLOW_REQUEST_SECONDS = 30.0


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware with performance metrics.

    Logs all requests with timing, status codes, and security-conscious
    data filtering.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.debug_mode = settings.environment == "development"

        # Paths to exclude from logging (health checks, docs)
        self.exclude_paths = {
            f"{settings.api_prefix}/health",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/favicon.ico",
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.time()
        correlation_id = get_correlation_id(request)

        self._log_request_start(request, correlation_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                f"{request.method} {request.url.path} -> FAILED "
                f"({round(duration * 1000, 2)}ms)",
                error_context={
                    "event_type": "request_failed",
                    "exception_type": type(exc).__name__,
                },
                correlation_id=correlation_id,
            )
            raise

        self._log_request_complete(
            request, response, time.time() - start_time, correlation_id
        )
        return response

    def _log_request_start(self, request: Request, correlation_id: str) -> None:
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": getattr(request.client, "host", "unknown"),
            "content_length": request.headers.get("content-length"),
            "content_type": request.headers.get("content-type"),
        }

        if self.debug_mode:
            request_info["headers"] = {
                k: v
                for k, v in request.headers.items()
                if k.lower() not in SENSITIVE_HEADERS
            }

        logger.info(
            f"{request.method} {request.url.path}",
            extra_context={"event_type": "request_start", "request_info": request_info},
            emoji=LogEmoji.REQUEST,
            correlation_id=correlation_id,
        )

    def _log_request_complete(
        self, request: Request, response: Response, duration: float, correlation_id: str
    ) -> None:
        status_code = response.status_code
        duration_ms = round(duration * 1000, 2)
        message = f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)"
        context = {
            "event_type": "request_complete",
            "status_code": status_code,
            "duration_ms": duration_ms,
        }

        if status_code >= 500:
            logger.error(message, error_context=context, correlation_id=correlation_id)
        elif status_code >= 400 or duration > SLOW_REQUEST_SECONDS:
            logger.warning(message, extra_context=context, correlation_id=correlation_id)
        else:
            logger.info(
                message,
                extra_context=context,
                emoji=LogEmoji.RESPONSE,
                correlation_id=correlation_id,
            )
