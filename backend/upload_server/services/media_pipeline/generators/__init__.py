# backend/upload_server/services/media_pipeline/generators/__init__.py
"""
Derivative Generation Components

- ImageThumbnailGenerator: 320×320-bounded PNG thumbnail for images
- VideoDerivativeGenerator: screenshots plus animated GIF preview for videos
"""

from .image_thumbnail_generator import ImageThumbnailGenerator
from .video_derivative_generator import VideoDerivativeGenerator

__all__ = [
    "ImageThumbnailGenerator",
    "VideoDerivativeGenerator",
]
