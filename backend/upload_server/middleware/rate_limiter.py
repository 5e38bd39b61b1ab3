#!/usr/bin/env python3
# backend/upload_server/middleware/rate_limiter.py

"""
Rate Limiting - Prevent upload flooding and abuse.

Implements sliding window rate limiting keyed by the authenticated user
when a valid bearer token is present, else by client IP.
"""

import asyncio
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from fastapi import Request

from ..config import Settings
from ..enums import LogEmoji, LoggerName, LogSource
from ..security import decode_token_optional
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.MIDDLEWARE, LogSource.MIDDLEWARE)


class SlidingWindowRateLimiter:
    """
    Sliding window rate limiter implementation.

    Tracks requests per client within a time window and enforces limits.
    """

    def __init__(self) -> None:
        # Dict[client_id, deque[timestamp]]
        self._requests: Dict[str, deque] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def is_allowed(
        self, client_id: str, max_requests: int, window_seconds: int
    ) -> Tuple[bool, Dict[str, Any]]:
        """
        Check if request is allowed within rate limits.

        Args:
            client_id: Unique identifier for client (``user:<id>`` or ``ip:<addr>``)
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_allowed, rate_limit_info)
        """
        current_time = time.time()
        window_start = current_time - window_seconds

        async with self._lock:
            request_times = self._requests[client_id]

            while request_times and request_times[0] <= window_start:
                request_times.popleft()

            current_requests = len(request_times)
            is_allowed = current_requests < max_requests

            if is_allowed:
                request_times.append(current_time)

            remaining = max(
                0, max_requests - current_requests - (1 if is_allowed else 0)
            )
            # Oldest request in the window decides when a slot frees up
            oldest = request_times[0] if request_times else current_time
            retry_after = max(1, int(oldest + window_seconds - current_time + 0.999))

            rate_limit_info = {
                "limit": max_requests,
                "remaining": remaining,
                "reset": int(oldest + window_seconds),
                "window_seconds": window_seconds,
                "current_requests": current_requests,
                "retry_after": retry_after,
            }

        if not is_allowed:
            logger.warning(
                f"Rate limit exceeded for {client_id}: "
                f"{current_requests}/{max_requests} requests in {window_seconds}s window",
                emoji=LogEmoji.CANCELED,
            )

        return is_allowed, rate_limit_info

    async def cleanup_old_entries(self, max_age_seconds: int = 3600) -> int:
        """
        Clean up old request tracking data.

        Returns:
            Number of client entries cleaned up
        """
        cutoff_time = time.time() - max_age_seconds
        cleaned_count = 0

        async with self._lock:
            clients_to_remove = []

            for client_id, request_times in self._requests.items():
                while request_times and request_times[0] < cutoff_time:
                    request_times.popleft()
                if not request_times:
                    clients_to_remove.append(client_id)

            for client_id in clients_to_remove:
                del self._requests[client_id]
                cleaned_count += 1

        if cleaned_count > 0:
            logger.debug(
                f"Rate limiter cleaned up {cleaned_count} old client entries",
                emoji=LogEmoji.CLEANUP,
            )
        return cleaned_count


@dataclass(frozen=True)
class RateLimit:
    max_requests: int
    window_seconds: int


class RateLimitConfig:
    """Budgets per endpoint group, read from settings."""

    def __init__(self, settings: Settings, api_prefix: str = "/api/v1"):
        self.api_prefix = api_prefix.rstrip("/")
        self.upload = RateLimit(
            settings.upload_rate_limit_requests,
            settings.upload_rate_limit_window_seconds,
        )
        self.api_general = RateLimit(
            settings.api_rate_limit_requests, settings.api_rate_limit_window_seconds
        )

    def bucket_for(self, path: str) -> Tuple[str, RateLimit]:
        """
        Pick the budget for a request path.

        Upload routes share one dedicated budget; everything else under the
        API prefix uses the general one.
        """
        if path.startswith(f"{self.api_prefix}/upload"):
            return "upload", self.upload
        return "api", self.api_general


def get_client_identifier(request: Request) -> str:
    """
    Extract client identifier for rate limiting.

    A valid bearer token wins over the address, so users behind one NAT
    do not share a budget.
    """
    token = decode_token_optional(request.headers.get("Authorization"))
    if token is not None:
        return f"user:{token.user_id}"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
    else:
        client_ip = request.client.host if request.client else "unknown"

    return f"ip:{client_ip}"
