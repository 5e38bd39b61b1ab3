#!/usr/bin/env python3
"""
Unit tests for ImageThumbnailGenerator.

Exercises real Pillow encoding against small generated images.
"""

import struct
from unittest.mock import patch

import pytest
from PIL import Image

from upload_server.exceptions import ThumbnailGenerationError
from upload_server.services.media_pipeline.generators import ImageThumbnailGenerator

EXIF_ORIENTATION_TAG = 0x0112
EXIF_TRANSPOSE = (
    "upload_server.services.media_pipeline.generators."
    "image_thumbnail_generator.ImageOps.exif_transpose"
)


@pytest.fixture
def generator():
    return ImageThumbnailGenerator()


@pytest.mark.unit
@pytest.mark.pipeline
class TestImageThumbnailGenerator:
    """Thumbnail sizing, orientation and failure handling."""

    def test_landscape_image_fits_bounding_box(self, generator, temp_dir, image_factory):
        source = image_factory(temp_dir / "abc_7.png", size=(640, 480))

        output = generator.generate_thumbnail(source)

        assert output == temp_dir / "abc_7-thumb.png"
        with Image.open(output) as thumb:
            assert thumb.format == "PNG"
            assert thumb.size == (320, 240)

    def test_portrait_image_fits_bounding_box(self, generator, temp_dir, image_factory):
        source = image_factory(temp_dir / "abc_7.jpg", size=(400, 800), image_format="JPEG")

        output = generator.generate_thumbnail(source)

        with Image.open(output) as thumb:
            assert thumb.size == (160, 320)

    def test_small_image_is_not_upscaled(self, generator, temp_dir, image_factory):
        source = image_factory(temp_dir / "abc_7.png", size=(100, 50))

        output = generator.generate_thumbnail(source)

        with Image.open(output) as thumb:
            assert thumb.size == (100, 50)

    def test_exif_orientation_is_applied(self, generator, temp_dir):
        source = temp_dir / "rotated_7.jpg"
        exif = Image.Exif()
        exif[EXIF_ORIENTATION_TAG] = 6
        Image.new("RGB", (640, 480), (10, 20, 30)).save(source, "JPEG", exif=exif)

        output = generator.generate_thumbnail(source)

        # Orientation 6 rotates the landscape pixels into portrait
        with Image.open(output) as thumb:
            assert thumb.size == (240, 320)

    def test_cmyk_source_is_converted(self, generator, temp_dir, image_factory):
        source = image_factory(
            temp_dir / "print_7.jpg", size=(640, 640), mode="CMYK", image_format="JPEG"
        )

        output = generator.generate_thumbnail(source)

        with Image.open(output) as thumb:
            assert thumb.mode == "RGB"
            assert thumb.size == (320, 320)

    def test_transparency_is_preserved(self, generator, temp_dir, image_factory):
        source = image_factory(temp_dir / "logo_7.png", size=(640, 320), mode="RGBA")

        output = generator.generate_thumbnail(source)

        with Image.open(output) as thumb:
            assert thumb.mode == "RGBA"

    def test_undecodable_file_raises_and_leaves_nothing(self, generator, temp_dir):
        source = temp_dir / "broken_7.png"
        source.write_bytes(b"definitely not an image")

        with pytest.raises(ThumbnailGenerationError):
            generator.generate_thumbnail(source)

        assert sorted(p.name for p in temp_dir.iterdir()) == ["broken_7.png"]

    @pytest.mark.parametrize(
        "error",
        [
            struct.error("unpack requires a buffer"),
            IndexError("tuple index out of range"),
            SyntaxError("not a PNG file"),
        ],
    )
    def test_unexpected_decoder_errors_are_wrapped(
        self, generator, temp_dir, image_factory, error
    ):
        source = image_factory(temp_dir / "abc_7.png", size=(640, 480))

        with patch(EXIF_TRANSPOSE, side_effect=error):
            with pytest.raises(ThumbnailGenerationError):
                generator.generate_thumbnail(source)

        assert sorted(p.name for p in temp_dir.iterdir()) == ["abc_7.png"]

    def test_missing_source_raises(self, generator, temp_dir):
        with pytest.raises(ThumbnailGenerationError):
            generator.generate_thumbnail(temp_dir / "missing_7.png")

    def test_custom_target_size(self, temp_dir, image_factory):
        generator = ImageThumbnailGenerator(target_size=(64, 64))
        source = image_factory(temp_dir / "abc_7.png", size=(640, 480))

        output = generator.generate_thumbnail(source)

        with Image.open(output) as thumb:
            assert thumb.size == (64, 48)
