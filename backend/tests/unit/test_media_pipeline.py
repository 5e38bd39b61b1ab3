#!/usr/bin/env python3
"""
Unit tests for MediaPipeline dispatch and the overall timeout.
"""

import asyncio
import threading

import pytest

from upload_server.config import Settings
from upload_server.enums import UploadCategory
from upload_server.exceptions import (
    InvalidInputError,
    PipelineTimeoutError,
    ScreenshotFailureError,
)
from upload_server.models import DerivativeSet, UploadedAsset
from upload_server.services.media_pipeline import MediaPipeline, create_media_pipeline
from upload_server.services.media_pipeline.generators import ImageThumbnailGenerator


class StubVideoGenerator:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result or DerivativeSet(
            screenshots=["v_7-thumb-1.png", "v_7-thumb-2.png", "v_7-thumb-3.png"],
            gif="v_7-animation.gif",
        )
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, source_path):
        self.calls.append(source_path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


class BlockingImageGenerator(ImageThumbnailGenerator):
    """Holds the worker thread until released, then writes the thumbnail."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.finished = threading.Event()

    def generate_thumbnail(self, source_path):
        self.release.wait(timeout=5)
        try:
            return super().generate_thumbnail(source_path)
        finally:
            self.finished.set()


def make_asset(path, media_type):
    return UploadedAsset(
        filename=path.name,
        path=path,
        media_type=media_type,
        filesize=path.stat().st_size if path.exists() else 0,
        owner_id=7,
        category=UploadCategory.GENERAL,
    )


@pytest.mark.unit
@pytest.mark.pipeline
class TestMediaPipeline:
    @pytest.mark.asyncio
    async def test_image_gets_thumbnail(self, temp_dir, image_factory):
        source = image_factory(temp_dir / "img_7.png")
        video = StubVideoGenerator()
        pipeline = MediaPipeline(ImageThumbnailGenerator(), video, pipeline_timeout=30)

        derivatives = await pipeline.process(make_asset(source, "image/png"))

        assert derivatives.thumbnail == "img_7-thumb.png"
        assert derivatives.screenshots == []
        assert (temp_dir / "img_7-thumb.png").is_file()
        assert video.calls == []

    @pytest.mark.asyncio
    async def test_video_dispatched_to_video_generator(self, temp_dir):
        source = temp_dir / "v_7.mp4"
        source.write_bytes(b"video")
        video = StubVideoGenerator()
        pipeline = MediaPipeline(ImageThumbnailGenerator(), video, pipeline_timeout=30)

        derivatives = await pipeline.process(make_asset(source, "video/mp4"))

        assert video.calls == [source]
        assert derivatives.gif == "v_7-animation.gif"

    @pytest.mark.asyncio
    async def test_unsupported_media_type(self, temp_dir):
        source = temp_dir / "doc_7.txt"
        source.write_text("hello")
        pipeline = MediaPipeline(
            ImageThumbnailGenerator(), StubVideoGenerator(), pipeline_timeout=30
        )

        with pytest.raises(InvalidInputError, match="Unsupported media type"):
            await pipeline.process(make_asset(source, "text/plain"))

    @pytest.mark.asyncio
    async def test_fatal_generator_error_propagates(self, temp_dir):
        source = temp_dir / "v_7.mp4"
        source.write_bytes(b"video")
        pipeline = MediaPipeline(
            ImageThumbnailGenerator(),
            StubVideoGenerator(error=ScreenshotFailureError()),
            pipeline_timeout=30,
        )

        with pytest.raises(ScreenshotFailureError):
            await pipeline.process(make_asset(source, "video/mp4"))

    @pytest.mark.asyncio
    async def test_overall_timeout(self, temp_dir):
        source = temp_dir / "v_7.mp4"
        source.write_bytes(b"video")
        pipeline = MediaPipeline(
            ImageThumbnailGenerator(),
            StubVideoGenerator(delay=5),
            pipeline_timeout=0.05,
        )

        with pytest.raises(PipelineTimeoutError) as exc_info:
            await pipeline.process(make_asset(source, "video/mp4"))

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_thumbnail_finishing_after_timeout_is_removed(
        self, temp_dir, image_factory
    ):
        source = image_factory(temp_dir / "img_7.png")
        image = BlockingImageGenerator()
        pipeline = MediaPipeline(image, StubVideoGenerator(), pipeline_timeout=0.05)

        with pytest.raises(PipelineTimeoutError):
            await pipeline.process(make_asset(source, "image/png"))

        image.release.set()
        await asyncio.to_thread(image.finished.wait, 5)
        thumbnail = temp_dir / "img_7-thumb.png"
        for _ in range(200):
            if not thumbnail.exists():
                break
            await asyncio.sleep(0.01)

        assert not thumbnail.exists()
        assert source.is_file()

    def test_factory_reads_settings(self, temp_dir):
        settings = Settings(
            upload_directory=str(temp_dir / "u"),
            profile_directory=str(temp_dir / "p"),
            ffmpeg_path="/usr/local/bin/ffmpeg",
            ffmpeg_command_timeout_seconds=30,
            pipeline_timeout_seconds=90,
            parallel_derivatives=True,
        )

        pipeline = create_media_pipeline(settings)

        assert pipeline.pipeline_timeout == 90
        assert pipeline.video_generator.ffmpeg_path == "/usr/local/bin/ffmpeg"
        assert pipeline.video_generator.command_timeout == 30
        assert pipeline.video_generator.parallel is True
        assert create_media_pipeline(settings, pipeline_timeout=5).pipeline_timeout == 5
