# backend/upload_server/services/media_pipeline/utils/__init__.py
"""
Media Pipeline Utilities

Naming helpers, ffmpeg command builders and pipeline constants.
"""

from . import constants, ffmpeg_utils, naming

__all__ = ["constants", "ffmpeg_utils", "naming"]
