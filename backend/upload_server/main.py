# backend/upload_server/main.py
"""
FastAPI application entry point for the upload server.

This file only wires HTTP concerns: logging setup, middleware, exception
handlers, routers and the static mounts for the storage roots.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .constants import (
    APPLICATION_DESCRIPTION,
    APPLICATION_NAME,
    APPLICATION_VERSION,
    PROFILE_MOUNT_PATH,
    UPLOADS_MOUNT_PATH,
)
from .enums import LogEmoji, LoggerName, LogSource
from .exceptions import UploadServerError
from .middleware import (
    ErrorHandlerMiddleware,
    RateLimitMiddleware,
    RequestLoggerMiddleware,
    http_exception_handler,
    upload_server_error_handler,
    validation_exception_handler,
)
from .routers import health_router, upload_router
from .services.logger import get_service_logger, initialize_global_logger
from .services.media_pipeline.utils import ffmpeg_utils

logger = get_service_logger(LoggerName.SYSTEM, LogSource.SYSTEM)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Handle application startup and shutdown"""
    app_settings: Settings = _app.state.settings

    _app.state.logger_service = initialize_global_logger(
        level=app_settings.log_level,
        log_file=app_settings.log_file,
    )
    app_settings.ensure_directories()

    logger.info(
        "Starting upload server",
        emoji=LogEmoji.STARTUP,
        extra_context={
            "environment": app_settings.environment,
            "api_host": app_settings.api_host,
            "api_port": app_settings.api_port,
            "upload_directory": app_settings.upload_directory,
            "profile_directory": app_settings.profile_directory,
        },
    )

    for executable in (app_settings.ffmpeg_path, app_settings.ffprobe_path):
        available, detail = ffmpeg_utils.test_ffmpeg_available(executable)
        if not available:
            # Images still work; video uploads will fail at the probe stage
            logger.warning(f"{executable} unavailable: {detail}")

    yield

    logger.info("Shutting down upload server", emoji=LogEmoji.SHUTDOWN)
    _app.state.logger_service.shutdown()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to wire in; defaults to the global settings

    Returns:
        Configured FastAPI instance
    """
    app_settings = app_settings or default_settings
    app_settings.ensure_directories()

    app = FastAPI(
        title="Upload Server API",
        description=APPLICATION_DESCRIPTION,
        version=APPLICATION_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Middleware stack (last added = outermost)
    app.add_middleware(RateLimitMiddleware, settings=app_settings)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(UploadServerError, upload_server_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(upload_router, prefix=app_settings.api_prefix)
    app.include_router(health_router, prefix=app_settings.api_prefix)

    # Profile root first so a relocated profile directory still resolves
    app.mount(
        PROFILE_MOUNT_PATH,
        StaticFiles(directory=app_settings.profile_path),
        name="profile",
    )
    app.mount(
        UPLOADS_MOUNT_PATH,
        StaticFiles(directory=app_settings.upload_path),
        name="uploads",
    )

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": APPLICATION_NAME,
            "version": APPLICATION_VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "upload_server.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.api_reload,
        log_level=default_settings.log_level.value.lower(),
    )
