# backend/upload_server/services/media_pipeline/utils/media_types.py
"""
MIME category helpers.
"""

from typing import Optional

from ....enums import MediaCategory


def media_category_for(media_type: Optional[str]) -> Optional[MediaCategory]:
    """
    Map a declared MIME type to the generator that handles it.

    ``image/png`` -> IMAGE, ``video/mp4`` -> VIDEO, anything else -> None.
    """
    if not media_type:
        return None

    top_level = media_type.split("/", 1)[0].strip().lower()
    try:
        return MediaCategory(top_level)
    except ValueError:
        return None
