#!/usr/bin/env python3
"""
Unit tests for UploadService orchestration and cleanup on failure.
"""

import asyncio
import struct
from unittest.mock import patch

import pytest

from upload_server.exceptions import (
    InvalidInputError,
    PipelineTimeoutError,
    ProbeFailureError,
    ThumbnailGenerationError,
)
from upload_server.models import DerivativeSet, TokenContent
from upload_server.services.media_pipeline import MediaPipeline
from upload_server.services.media_pipeline.generators import (
    ImageThumbnailGenerator,
    VideoDerivativeGenerator,
)
from upload_server.services.upload_service import UploadService
from upload_server.services.media_pipeline.utils.naming import (
    base_filename,
    screenshot_name,
)

USER = TokenContent(user_id=7, level_name="User")


class FakePipeline:
    """Writes derivative files next to the asset, then optionally fails."""

    def __init__(self, error=None, write_partial=False, hang=False):
        self.error = error
        self.write_partial = write_partial
        self.hang = hang
        self.processed = []

    async def process(self, asset):
        self.processed.append(asset)
        base = base_filename(asset.filename)
        if self.write_partial:
            asset.path.with_name(screenshot_name(base, 1)).write_bytes(b"frame")
        if self.hang:
            await asyncio.sleep(60)
        if self.error is not None:
            raise self.error
        thumb = f"{base}-thumb.png"
        asset.path.with_name(thumb).write_bytes(b"thumb")
        return DerivativeSet(thumbnail=thumb)


def stored_files(root):
    return sorted(p.name for p in root.iterdir() if p.is_file())


@pytest.mark.unit
@pytest.mark.storage
class TestUploadService:
    @pytest.mark.asyncio
    async def test_image_upload_returns_thumbnail(
        self, storage, upload_root, upload_factory, png_bytes
    ):
        service = UploadService(storage, FakePipeline())

        data = await service.upload_media(upload_factory(png_bytes(), "photo.png"), USER)

        assert data.thumbnail == f"{base_filename(data.filename)}-thumb.png"
        assert data.screenshots is None
        assert data.gif is None
        assert stored_files(upload_root) == sorted([data.filename, data.thumbnail])

    @pytest.mark.asyncio
    async def test_fatal_pipeline_error_removes_everything(
        self, storage, upload_root, upload_factory
    ):
        service = UploadService(
            storage, FakePipeline(error=ProbeFailureError(), write_partial=True)
        )

        with pytest.raises(ProbeFailureError):
            await service.upload_media(
                upload_factory(b"video", "clip.mp4", "video/mp4"), USER
            )

        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_unexpected_pipeline_error_removes_everything(
        self, storage, upload_root, upload_factory
    ):
        pipeline = FakePipeline(error=RuntimeError("decoder crashed"), write_partial=True)
        service = UploadService(storage, pipeline)

        with pytest.raises(RuntimeError):
            await service.upload_media(
                upload_factory(b"video", "clip.mp4", "video/mp4"), USER
            )

        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_malformed_image_removes_original(
        self, storage, upload_root, upload_factory, png_bytes
    ):
        pipeline = MediaPipeline(
            ImageThumbnailGenerator(), VideoDerivativeGenerator(), pipeline_timeout=30
        )
        service = UploadService(storage, pipeline)

        with patch(
            "upload_server.services.media_pipeline.generators."
            "image_thumbnail_generator.ImageOps.exif_transpose",
            side_effect=struct.error("unpack requires a buffer of 4 bytes"),
        ):
            with pytest.raises(ThumbnailGenerationError):
                await service.upload_media(
                    upload_factory(png_bytes(), "photo.png"), USER
                )

        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_timeout_removes_everything(self, storage, upload_root, upload_factory):
        service = UploadService(storage, FakePipeline(error=PipelineTimeoutError()))

        with pytest.raises(PipelineTimeoutError):
            await service.upload_media(
                upload_factory(b"video", "clip.mp4", "video/mp4"), USER
            )

        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_cancellation_removes_everything(
        self, storage, upload_root, upload_factory
    ):
        pipeline = FakePipeline(write_partial=True, hang=True)
        service = UploadService(storage, pipeline)

        task = asyncio.create_task(
            service.upload_media(upload_factory(b"video", "clip.mp4", "video/mp4"), USER)
        )
        while not pipeline.processed:
            await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_validation_error_writes_nothing(self, storage, upload_root, upload_factory):
        pipeline = FakePipeline()
        service = UploadService(storage, pipeline)

        with pytest.raises(InvalidInputError):
            await service.upload_media(upload_factory(b"x", "notes.txt", "text/plain"), USER)

        assert pipeline.processed == []
        assert stored_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_profile_upload_skips_pipeline(
        self, storage, profile_root, upload_factory, png_bytes
    ):
        pipeline = FakePipeline()
        service = UploadService(storage, pipeline)

        data = await service.upload_profile_picture(
            upload_factory(png_bytes(), "me.png"), USER
        )

        assert pipeline.processed == []
        assert data.thumbnail is None
        assert stored_files(profile_root) == [data.filename]
