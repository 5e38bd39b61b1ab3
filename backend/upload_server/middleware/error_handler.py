# backend/upload_server/middleware/error_handler.py
"""
Error handling for the upload server.

Every error leaves the process as ``{"message": ..., "status": ...}``.
Typed errors keep their own status; anything unhandled is logged with a
correlation ID and answered with a generic 500.
"""

import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..config import settings
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import UploadServerError
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.ERROR_HANDLER, LogSource.MIDDLEWARE)

GENERIC_ERROR_MESSAGE = "An error occurred"

# Headers never copied into logs
SENSITIVE_HEADERS = {"authorization", "cookie"}


def error_body(message: str, status: int) -> dict:
    return {"message": message, "status": status}


def get_correlation_id(request: Request) -> str:
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
        request.state.correlation_id = correlation_id
    return correlation_id


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Centralized error handling middleware.

    Catches all unhandled exceptions, logs them with correlation IDs,
    and returns user-friendly error responses.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.debug_mode = settings.environment == "development"

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = get_correlation_id(request)

        try:
            return await call_next(request)
        except UploadServerError as exc:
            return await upload_server_error_handler(request, exc)
        except Exception as exc:
            self._log_error(exc, request, correlation_id)
            return self._create_error_response(exc)

    def _log_error(self, exc: Exception, request: Request, correlation_id: str) -> None:
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "headers": {
                k: v
                for k, v in request.headers.items()
                if k.lower() not in SENSITIVE_HEADERS
            },
            "client_ip": getattr(request.client, "host", "unknown"),
        }
        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}",
            exception=exc,
            emoji=LogEmoji.FIRE,
            error_context={
                "exception_type": type(exc).__name__,
                "request_info": request_info,
            },
            correlation_id=correlation_id,
        )

    def _create_error_response(self, exc: Exception) -> JSONResponse:
        body = error_body(GENERIC_ERROR_MESSAGE, 500)
        # Include exception details in debug mode
        if self.debug_mode:
            body["exception_type"] = type(exc).__name__
            body["exception_message"] = str(exc)
            body["traceback"] = traceback.format_exc()
        return JSONResponse(status_code=500, content=body)


# ====================================================================
# EXCEPTION HANDLERS (registered on the app)
# ====================================================================


async def upload_server_error_handler(
    request: Request, exc: UploadServerError
) -> JSONResponse:
    """Typed errors keep their status code and message."""
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}",
            exception=exc.__cause__,
            correlation_id=getattr(request.state, "correlation_id", None),
        )
    return JSONResponse(
        status_code=exc.status_code, content=error_body(exc.message, exc.status_code)
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework HTTP errors, including unknown routes."""
    message = exc.detail if isinstance(exc.detail, str) else GENERIC_ERROR_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests are reported as invalid input."""
    details = [
        f"{' -> '.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("; ".join(details) or "Invalid input", 400),
    )
