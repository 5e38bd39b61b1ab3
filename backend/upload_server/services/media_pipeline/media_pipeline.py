# backend/upload_server/services/media_pipeline/media_pipeline.py
"""
Main Media Pipeline Class

Provides the single entry point that turns a stored upload into its
derivatives. Dispatches on the MIME category of the upload and bounds the
whole run with one overall timeout.
"""

import asyncio
from typing import Optional

from ...config import Settings
from ...enums import LogEmoji, LoggerName, LogSource, MediaCategory
from ...exceptions import InvalidInputError, PipelineTimeoutError
from ...models import DerivativeSet, UploadedAsset
from ...services.logger import get_service_logger
from ...utils.file_helpers import delete_file_safe
from .generators import ImageThumbnailGenerator, VideoDerivativeGenerator
from .utils.media_types import media_category_for

logger = get_service_logger(
    LoggerName.MEDIA_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.PROCESSING
)


class MediaPipeline:
    """
    Derivative pipeline with injected generators.

    Images get one thumbnail; videos get screenshots and an animated
    preview. Fatal errors propagate unchanged, a run that exceeds the
    overall budget raises PipelineTimeoutError.
    """

    def __init__(
        self,
        image_generator: ImageThumbnailGenerator,
        video_generator: VideoDerivativeGenerator,
        pipeline_timeout: float,
    ):
        self.image_generator = image_generator
        self.video_generator = video_generator
        self.pipeline_timeout = pipeline_timeout

    async def process(self, asset: UploadedAsset) -> DerivativeSet:
        """
        Generate every derivative for a stored upload.

        Args:
            asset: Stored original

        Returns:
            DerivativeSet with names relative to the asset's directory

        Raises:
            InvalidInputError: If the MIME category has no generator
            PipelineTimeoutError: If the run exceeds the overall budget
            UploadServerError: Any fatal stage error from a generator
        """
        category = media_category_for(asset.media_type)
        if category is None:
            raise InvalidInputError("Unsupported media type")

        logger.debug(
            f"Processing {asset.filename}",
            extra_context={"category": category.value, "filesize": asset.filesize},
        )

        try:
            derivatives = await asyncio.wait_for(
                self._dispatch(category, asset), timeout=self.pipeline_timeout
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Pipeline exceeded {self.pipeline_timeout}s for {asset.filename}",
                emoji=LogEmoji.TIMEOUT,
            )
            raise PipelineTimeoutError() from e

        logger.info(f"Processed {asset.filename}", emoji=LogEmoji.SUCCESS)
        return derivatives

    async def _dispatch(
        self, category: MediaCategory, asset: UploadedAsset
    ) -> DerivativeSet:
        if category == MediaCategory.IMAGE:
            work = asyncio.ensure_future(
                asyncio.to_thread(self.image_generator.generate_thumbnail, asset.path)
            )
            try:
                thumbnail_path = await asyncio.shield(work)
            except asyncio.CancelledError:
                # The worker thread cannot be interrupted; drop its output when it lands
                work.add_done_callback(_discard_late_thumbnail)
                raise
            return DerivativeSet(thumbnail=thumbnail_path.name)

        return await self.video_generator.generate(asset.path)


def _discard_late_thumbnail(work: asyncio.Future) -> None:
    if work.cancelled() or work.exception() is not None:
        return
    if delete_file_safe(work.result()):
        logger.debug(
            f"Removed late thumbnail {work.result().name}", emoji=LogEmoji.CLEANUP
        )


# Factory function for creating pipeline instances


def create_media_pipeline(
    settings: Settings, pipeline_timeout: Optional[float] = None
) -> MediaPipeline:
    """
    Build a pipeline from application settings.

    Args:
        settings: Application settings (tool paths, timeouts, concurrency)
        pipeline_timeout: Override for the overall budget

    Returns:
        Configured MediaPipeline instance
    """
    return MediaPipeline(
        image_generator=ImageThumbnailGenerator(),
        video_generator=VideoDerivativeGenerator(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
            command_timeout=settings.ffmpeg_command_timeout_seconds,
            parallel=settings.parallel_derivatives,
        ),
        pipeline_timeout=(
            pipeline_timeout
            if pipeline_timeout is not None
            else settings.pipeline_timeout_seconds
        ),
    )
