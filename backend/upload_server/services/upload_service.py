# backend/upload_server/services/upload_service.py
"""
Upload Service

Coordinates storage and the media pipeline for one upload request:
store the original, generate derivatives, and undo the write when
processing fails fatally or the request is abandoned.
"""

import asyncio
from typing import Optional

from fastapi import UploadFile

from ..enums import LogEmoji, LoggerName, LogSource, UploadCategory
from ..models import TokenContent, UploadData
from .logger import get_service_logger
from .media_pipeline import MediaPipeline
from .storage_service import MediaStorage

logger = get_service_logger(LoggerName.MEDIA_PIPELINE, LogSource.API)


class UploadService:
    """Upload orchestration with injected storage and pipeline."""

    def __init__(self, storage: MediaStorage, pipeline: MediaPipeline):
        self.storage = storage
        self.pipeline = pipeline

    async def upload_media(
        self, upload: Optional[UploadFile], user: TokenContent
    ) -> UploadData:
        """
        Store a general upload and generate its derivatives.

        On any pipeline error, expected or not, a timeout or cancellation,
        the stored original and any derivatives already written are removed before the
        error propagates.
        """
        asset = await self.storage.save_upload(
            upload, user.user_id, UploadCategory.GENERAL
        )

        try:
            derivatives = await self.pipeline.process(asset)
        except (Exception, asyncio.CancelledError) as e:
            logger.warning(
                f"Processing failed for {asset.filename}, removing stored files",
                emoji=LogEmoji.CLEANUP,
                extra_context={"error": type(e).__name__},
            )
            self.storage.discard(asset)
            raise

        return UploadData.from_asset(asset, derivatives)

    async def upload_profile_picture(
        self, upload: Optional[UploadFile], user: TokenContent
    ) -> UploadData:
        """Store a profile picture. Profile uploads get no derivatives."""
        asset = await self.storage.save_upload(
            upload, user.user_id, UploadCategory.PROFILE
        )
        return UploadData.from_asset(asset)
