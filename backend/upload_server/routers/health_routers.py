# backend/upload_server/routers/health_routers.py
"""
Service health HTTP endpoint.

Reports liveness plus whether the external media tools can be run and
the storage roots accept writes.
"""

import asyncio
import os
from datetime import datetime, timezone

from fastapi import APIRouter

from ..constants import APPLICATION_NAME, APPLICATION_VERSION
from ..dependencies import MediaStorageDep, SettingsDep
from ..enums import LogEmoji, LoggerName, LogSource
from ..models import HealthResponse, HealthStatus
from ..services.logger import get_service_logger
from ..services.media_pipeline.utils import ffmpeg_utils
from ..utils.router_helpers import handle_exceptions

router = APIRouter(tags=["health"])
logger = get_service_logger(
    LoggerName.SYSTEM, LogSource.HEALTH, default_emoji=LogEmoji.HEALTH
)


@router.get("/health", response_model=HealthResponse)
@handle_exceptions("health check")
async def health_check(settings: SettingsDep, storage: MediaStorageDep) -> HealthResponse:
    """
    Quick health check endpoint for load balancers and monitoring.

    Degraded when ffmpeg/ffprobe are missing or a storage root is not
    writable; uploads of videos would fail in that state.
    """
    ffmpeg_ok, _ = await asyncio.to_thread(
        ffmpeg_utils.test_ffmpeg_available, settings.ffmpeg_path
    )
    ffprobe_ok, _ = await asyncio.to_thread(
        ffmpeg_utils.test_ffmpeg_available, settings.ffprobe_path
    )
    storage_writable = all(
        root.is_dir() and os.access(root, os.W_OK)
        for root in (storage.upload_root, storage.profile_root)
    )

    healthy = ffmpeg_ok and ffprobe_ok and storage_writable
    if not healthy:
        logger.warning(
            "Health check degraded",
            extra_context={
                "ffmpeg": ffmpeg_ok,
                "ffprobe": ffprobe_ok,
                "storage_writable": storage_writable,
            },
        )

    return HealthResponse(
        status=HealthStatus.HEALTHY if healthy else HealthStatus.DEGRADED,
        timestamp=datetime.now(timezone.utc),
        service=APPLICATION_NAME,
        version=APPLICATION_VERSION,
        tools={"ffmpeg": ffmpeg_ok, "ffprobe": ffprobe_ok},
        storage_writable=storage_writable,
    )
