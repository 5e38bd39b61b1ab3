#!/usr/bin/env python3
# backend/upload_server/middleware/rate_limit_middleware.py

"""
Rate Limiting Middleware for FastAPI application.

Applies the sliding window limiter to API routes and stamps the
``X-RateLimit-*`` headers on every limited response.
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import Settings, settings as default_settings
from ..enums import LoggerName, LogSource
from ..services.logger import get_service_logger
from .error_handler import error_body
from .rate_limiter import (
    RateLimitConfig,
    SlidingWindowRateLimiter,
    get_client_identifier,
)

logger = get_service_logger(LoggerName.MIDDLEWARE, LogSource.MIDDLEWARE)

CLEANUP_INTERVAL_SECONDS = 300


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware for applying rate limits to API endpoints.

    Each instance owns its limiter, so every application built by the
    app factory starts with empty windows.
    """

    def __init__(
        self,
        app,
        settings: Optional[Settings] = None,
        limiter: Optional[SlidingWindowRateLimiter] = None,
    ):
        super().__init__(app)
        settings = settings or default_settings
        self.config = RateLimitConfig(settings, api_prefix=settings.api_prefix)
        self.limiter = limiter or SlidingWindowRateLimiter()
        self.last_cleanup = time.time()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path

        # Only API routes are limited; health checks never are
        if not path.startswith(self.config.api_prefix) or path.endswith("/health"):
            return await call_next(request)

        await self._maybe_cleanup()

        bucket, limit = self.config.bucket_for(path)
        client_id = get_client_identifier(request)
        is_allowed, rate_info = await self.limiter.is_allowed(
            client_id=f"{bucket}:{client_id}",
            max_requests=limit.max_requests,
            window_seconds=limit.window_seconds,
        )

        headers = {
            "X-RateLimit-Limit": str(rate_info["limit"]),
            "X-RateLimit-Remaining": str(rate_info["remaining"]),
            "X-RateLimit-Reset": str(rate_info["reset"]),
            "X-RateLimit-Window": str(rate_info["window_seconds"]),
        }

        if not is_allowed:
            headers["Retry-After"] = str(rate_info["retry_after"])
            return JSONResponse(
                status_code=429,
                content=error_body(
                    f"Too many requests. Maximum {rate_info['limit']} requests "
                    f"allowed per {rate_info['window_seconds']} seconds.",
                    429,
                ),
                headers=headers,
            )

        response = await call_next(request)
        for header_name, header_value in headers.items():
            response.headers[header_name] = header_value
        return response

    async def _maybe_cleanup(self) -> None:
        current_time = time.time()
        if current_time - self.last_cleanup <= CLEANUP_INTERVAL_SECONDS:
            return
        self.last_cleanup = current_time
        await self.limiter.cleanup_old_entries()
