# backend/upload_server/services/media_pipeline/generators/image_thumbnail_generator.py
"""
Image Thumbnail Generator Component

Generates a single 320×320-bounded PNG thumbnail next to an uploaded image.
"""

import os
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps

from ....enums import LogEmoji, LoggerName, LogSource
from ....exceptions import ThumbnailGenerationError
from ....services.logger import get_service_logger
from ....utils.file_helpers import delete_file_safe
from ..utils.constants import TEMP_FILE_SUFFIX, THUMBNAIL_FORMAT, THUMBNAIL_SIZE
from ..utils.naming import base_filename, thumbnail_name

logger = get_service_logger(
    LoggerName.IMAGE_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.THUMBNAIL
)

# Modes PNG can store without conversion
PNG_COMPATIBLE_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I"}


class ImageThumbnailGenerator:
    """
    Component responsible for image upload thumbnails.

    The thumbnail keeps the source aspect ratio, honours EXIF orientation
    and fits inside the bounding box. It is written to a temporary sibling
    and renamed into place, so a reader never sees a half-written file.
    """

    def __init__(self, target_size: Tuple[int, int] = THUMBNAIL_SIZE):
        self.target_size = target_size

    def output_path_for(self, source_path: Path) -> Path:
        return source_path.with_name(thumbnail_name(base_filename(source_path.name)))

    def generate_thumbnail(self, source_path: Path) -> Path:
        """
        Generate ``<base>-thumb.png`` for an uploaded image.

        Args:
            source_path: Stored original

        Returns:
            Path of the written thumbnail

        Raises:
            ThumbnailGenerationError: If the image cannot be decoded, resized
                or encoded
        """
        source_path = Path(source_path)
        output_path = self.output_path_for(source_path)
        temp_path = output_path.with_name(output_path.name + TEMP_FILE_SUFFIX)

        try:
            with Image.open(source_path) as img:
                oriented = ImageOps.exif_transpose(img)
                if oriented.mode not in PNG_COMPATIBLE_MODES:
                    oriented = oriented.convert("RGB")

                oriented.thumbnail(self.target_size, Image.Resampling.LANCZOS)
                oriented.save(temp_path, THUMBNAIL_FORMAT)
                final_size = oriented.size

            os.replace(temp_path, output_path)

        except Exception as e:
            # Malformed files surface as struct.error, IndexError, SyntaxError
            # and friends as well as the documented Pillow errors
            delete_file_safe(temp_path)
            logger.error(
                f"Failed to generate thumbnail for {source_path.name}",
                exception=e,
                error_context={"source_path": str(source_path)},
            )
            raise ThumbnailGenerationError() from e

        logger.debug(
            f"Generated thumbnail: {output_path.name}",
            extra_context={"width": final_size[0], "height": final_size[1]},
        )
        return output_path
