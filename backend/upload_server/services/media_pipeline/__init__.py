# backend/upload_server/services/media_pipeline/__init__.py
"""
Media Pipeline Module

Derivative generation for uploaded images and videos.
"""

from .generators import ImageThumbnailGenerator, VideoDerivativeGenerator
from .media_pipeline import MediaPipeline, create_media_pipeline
from .utils.media_types import media_category_for

__all__ = [
    "MediaPipeline",
    "create_media_pipeline",
    "ImageThumbnailGenerator",
    "VideoDerivativeGenerator",
    "media_category_for",
]
