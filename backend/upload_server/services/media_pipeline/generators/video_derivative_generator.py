# backend/upload_server/services/media_pipeline/generators/video_derivative_generator.py
"""
Video Derivative Generator Component

Turns an uploaded video into three screenshots and a palette-quantized
animated GIF preview through a fixed sequence of ffmpeg/ffprobe stages:

1. probe       duration from the container (fatal on failure)
2. screenshots three frames at 25/50/75 %, or picked without seeking when
               the duration is unknown (fatal on failure)
3. palette     32-colour palette of the retimed clip (degrades the preview)
4. gif         retimed clip mapped through the palette (degrades the preview)

The palette is transient and is removed whatever happens in stage 4.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from ....enums import LogEmoji, LoggerName, LogSource, PipelineStage
from ....exceptions import (
    CommandTimeoutError,
    DerivativeDegradedError,
    ProbeFailureError,
    ScreenshotFailureError,
)
from ....models import DerivativeSet, ProbeResult
from ....services.logger import get_service_logger
from ....utils.file_helpers import delete_file_safe, delete_files_safe
from ..utils.constants import SCREENSHOT_COUNT
from ..utils.ffmpeg_utils import (
    build_fallback_screenshot_command,
    build_gif_command,
    build_palette_command,
    build_probe_command,
    build_screenshot_command,
    calculate_fallback_batch_sizes,
    calculate_screenshot_timestamps,
    calculate_speed_factor,
    parse_probe_output,
    resolve_duration,
    run_command,
)
from ..utils.naming import base_filename, gif_name, palette_name, screenshot_name

logger = get_service_logger(
    LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.VIDEO
)


def _output_written(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0


class VideoDerivativeGenerator:
    """
    Component responsible for video screenshots and the animated preview.

    Stages run strictly one after another unless ``parallel`` is set, in
    which case screenshot extraction runs alongside palette/GIF generation.
    The failure contract is the same in both modes.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        command_timeout: float = 120,
        parallel: bool = False,
    ):
        """
        Initialize the video derivative generator.

        Args:
            ffmpeg_path: ffmpeg executable
            ffprobe_path: ffprobe executable
            command_timeout: Seconds allowed for each external process
            parallel: Run screenshots concurrently with the preview stages
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.command_timeout = command_timeout
        self.parallel = parallel

    async def generate(self, source_path: Path) -> DerivativeSet:
        """
        Run all four stages for a stored video.

        Returns:
            DerivativeSet with three screenshot names and the GIF name, or
            ``gif=None`` when the preview stages degraded

        Raises:
            ProbeFailureError: If the container could not be read
            ScreenshotFailureError: If any of the frames is missing
            CommandTimeoutError: If a fatal stage's process was killed
        """
        source_path = Path(source_path)
        probe = await self.probe(source_path)
        speed_factor = calculate_speed_factor(probe.duration_seconds)
        # The fallback duration is only good enough for retiming, never for seeking
        seek_duration = None if probe.fallback_used else probe.duration_seconds

        if self.parallel:
            screenshots, gif = await self._generate_concurrently(
                source_path, seek_duration, speed_factor
            )
        else:
            screenshots = await self.extract_screenshots(source_path, seek_duration)
            gif = await self.build_preview(source_path, speed_factor)

        logger.info(
            f"Derivatives ready for {source_path.name}",
            extra_context={
                "screenshots": len(screenshots),
                "gif": gif is not None,
                "speed_factor": speed_factor,
            },
        )
        return DerivativeSet(
            screenshots=[path.name for path in screenshots],
            gif=gif.name if gif is not None else None,
        )

    async def _generate_concurrently(
        self, source_path: Path, duration: Optional[float], speed_factor: float
    ):
        screenshots_task = asyncio.create_task(
            self.extract_screenshots(source_path, duration)
        )
        preview_task = asyncio.create_task(
            self.build_preview(source_path, speed_factor)
        )

        try:
            screenshots = await screenshots_task
        except BaseException:
            # A fatal screenshot failure takes the preview branch down with it
            preview_task.cancel()
            await asyncio.wait([preview_task])
            if (
                not preview_task.cancelled()
                and preview_task.exception() is None
                and preview_task.result() is not None
            ):
                delete_file_safe(preview_task.result())
            raise

        return screenshots, await preview_task

    # ====================================================================
    # STAGE 1: PROBE
    # ====================================================================

    async def probe(self, source_path: Path) -> ProbeResult:
        """Read the container duration, falling back when it is unusable."""
        result = await run_command(
            build_probe_command(self.ffprobe_path, str(source_path)),
            self.command_timeout,
        )
        if not result.success:
            logger.error(
                f"ffprobe failed for {source_path.name}",
                error_context={"stage": PipelineStage.PROBE.value, "stderr": result.stderr},
            )
            raise ProbeFailureError()

        try:
            raw_duration = parse_probe_output(result.stdout)
        except ValueError as e:
            logger.error(
                f"Unreadable probe output for {source_path.name}",
                exception=e,
                error_context={"stage": PipelineStage.PROBE.value},
            )
            raise ProbeFailureError() from e

        probe = resolve_duration(raw_duration)
        if probe.fallback_used:
            logger.warning(
                f"No usable duration for {source_path.name}, "
                f"using {probe.duration_seconds}s for the preview",
                extra_context={"raw_duration": raw_duration},
            )
        return probe

    # ====================================================================
    # STAGE 2: SCREENSHOTS
    # ====================================================================

    async def extract_screenshots(
        self,
        source_path: Path,
        duration: Optional[float],
        count: int = SCREENSHOT_COUNT,
    ) -> List[Path]:
        """
        Extract ``count`` frames as ``<base>-thumb-N.png``.

        With a known duration the frames are evenly spaced seeks; with
        ``duration=None`` each frame is picked from a growing window at the
        start of the clip instead.

        All or nothing: on any failure the frames already written are removed.
        """
        base = base_filename(source_path.name)
        outputs: List[Path] = []

        if duration is None:
            build = build_fallback_screenshot_command
            positions = calculate_fallback_batch_sizes(count)
        else:
            build = build_screenshot_command
            positions = calculate_screenshot_timestamps(duration, count)

        try:
            for index, position in enumerate(positions, start=1):
                output_path = source_path.with_name(screenshot_name(base, index))
                outputs.append(output_path)

                result = await run_command(
                    build(self.ffmpeg_path, str(source_path), position, str(output_path)),
                    self.command_timeout,
                )
                if not result.success or not _output_written(output_path):
                    logger.error(
                        f"Screenshot {index} missing for {source_path.name}",
                        error_context={
                            "stage": PipelineStage.SCREENSHOTS.value,
                            "position": position,
                            "stderr": result.stderr,
                        },
                    )
                    raise ScreenshotFailureError()
        except (Exception, asyncio.CancelledError):
            delete_files_safe(outputs)
            raise

        return outputs

    # ====================================================================
    # STAGES 3-4: PALETTE AND GIF
    # ====================================================================

    async def build_preview(
        self, source_path: Path, speed_factor: float
    ) -> Optional[Path]:
        """
        Generate the palette and then the GIF.

        Returns:
            Path of ``<base>-animation.gif``, or None if either stage failed
        """
        base = base_filename(source_path.name)
        palette_path = source_path.with_name(palette_name(base))
        gif_path = source_path.with_name(gif_name(base))

        try:
            await self._generate_palette(source_path, speed_factor, palette_path)
            await self._generate_gif(source_path, palette_path, speed_factor, gif_path)
            return gif_path
        except DerivativeDegradedError as e:
            delete_file_safe(gif_path)
            logger.warning(
                f"Animated preview unavailable for {source_path.name}: {e.message}",
                extra_context={"stage": e.stage.value},
            )
            return None
        except asyncio.CancelledError:
            delete_file_safe(gif_path)
            raise
        finally:
            delete_file_safe(palette_path)

    async def _generate_palette(
        self, source_path: Path, speed_factor: float, palette_path: Path
    ) -> None:
        command = build_palette_command(
            self.ffmpeg_path, str(source_path), speed_factor, str(palette_path)
        )
        try:
            result = await run_command(command, self.command_timeout)
        except CommandTimeoutError as e:
            raise DerivativeDegradedError(
                PipelineStage.PALETTE, "Palette generation timed out"
            ) from e

        if not result.success or not _output_written(palette_path):
            raise DerivativeDegradedError(
                PipelineStage.PALETTE, "Palette generation failed"
            )

    async def _generate_gif(
        self,
        source_path: Path,
        palette_path: Path,
        speed_factor: float,
        gif_path: Path,
    ) -> None:
        command = build_gif_command(
            self.ffmpeg_path,
            str(source_path),
            str(palette_path),
            speed_factor,
            str(gif_path),
        )
        try:
            result = await run_command(command, self.command_timeout)
        except CommandTimeoutError as e:
            raise DerivativeDegradedError(
                PipelineStage.GIF, "GIF generation timed out"
            ) from e

        if not result.success or not _output_written(gif_path):
            raise DerivativeDegradedError(PipelineStage.GIF, "GIF generation failed")
