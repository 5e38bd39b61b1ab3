# backend/upload_server/utils/router_helpers.py
"""
Router Helper Functions

Common decorators and helpers for the upload routers: standardized
exception handling and cancellation of work whose client disconnected.
"""

import asyncio
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from fastapi import HTTPException, Request

from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import ClientDisconnectedError, UploadServerError
from ..services.logger import get_service_logger

T = TypeVar("T")
logger = get_service_logger(LoggerName.API, LogSource.API)

DISCONNECT_POLL_SECONDS = 0.5


def handle_exceptions(operation_name: str):
    """
    Decorator for standardized exception handling in router endpoints.

    Typed errors and HTTP exceptions pass through unchanged. Anything else
    is logged and turned into a generic 500.

    Args:
        operation_name: Human-readable description of the operation for logs

    Usage:
        @handle_exceptions("delete file")
        async def delete_file(...):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except (UploadServerError, HTTPException):
                raise
            except Exception as e:
                logger.error(f"Error during {operation_name}", exception=e)
                raise UploadServerError() from e

        return wrapper

    return decorator


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """
    Await ``work`` while watching the client connection.

    If the client disconnects first, the work is cancelled (which kills
    any running child process and triggers its cleanup) and
    ClientDisconnectedError is raised.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning(
                    f"Client disconnected during {request.method} {request.url.path}",
                    emoji=LogEmoji.CANCELED,
                )
                task.cancel()
                await asyncio.wait({task})
                raise ClientDisconnectedError()
    except asyncio.CancelledError:
        task.cancel()
        raise
