# backend/upload_server/services/media_pipeline/utils/naming.py
"""
Stored filename and derivative naming.

Every stored upload is named ``<random20>_<user_id>.<ext>``. The owner of
a file is recovered from that name alone, and every derivative embeds the
stored file's base so a directory scan finds them again on delete.
"""

import secrets
import string
from typing import Optional

from ....exceptions import InvalidInputError
from .constants import (
    GIF_SUFFIX,
    OWNER_SEPARATOR,
    PALETTE_SUFFIX,
    RANDOM_NAME_LENGTH,
    SCREENSHOT_SUFFIX_TEMPLATE,
    THUMBNAIL_SUFFIX,
)

_RANDOM_ALPHABET = string.ascii_letters + string.digits


def get_extension(filename: Optional[str]) -> Optional[str]:
    """
    Extract the extension of a client-supplied filename.

    Returns:
        Text after the last ``.``, or None when there is no dot, nothing
        follows it, or it contains anything but letters and digits
    """
    if not filename or "." not in filename:
        return None

    extension = filename.rsplit(".", 1)[1]
    if not extension or not extension.isalnum():
        return None
    return extension


def generate_stored_filename(user_id: int, original_filename: Optional[str]) -> str:
    """
    Build ``<random20>_<user_id>.<ext>`` for a new upload.

    Raises:
        InvalidInputError: If the extension cannot be determined
    """
    extension = get_extension(original_filename)
    if extension is None:
        raise InvalidInputError("Invalid file extension")

    random_name = "".join(
        secrets.choice(_RANDOM_ALPHABET) for _ in range(RANDOM_NAME_LENGTH)
    )
    return f"{random_name}{OWNER_SEPARATOR}{user_id}.{extension}"


def base_filename(filename: str) -> str:
    """Everything before the first dot: ``abc_7.mp4`` -> ``abc_7``."""
    return filename.split(".", 1)[0]


def parse_owner_id(filename: str) -> Optional[int]:
    """
    Recover the owner id from a stored filename.

    The owner is the text after the last ``_`` and before the following
    ``.``. Returns None when the name does not follow the convention.
    """
    if OWNER_SEPARATOR not in filename:
        return None

    owner_part = filename.rsplit(OWNER_SEPARATOR, 1)[1].split(".", 1)[0]
    if not owner_part.isdigit():
        return None
    return int(owner_part)


def is_owned_by(filename: str, user_id: int) -> bool:
    owner_id = parse_owner_id(filename)
    return owner_id is not None and owner_id == user_id


def validate_plain_filename(filename: Optional[str]) -> str:
    """
    Reject anything that is not a bare filename.

    Raises:
        InvalidInputError: If the name is empty, contains a path separator
            or a parent-directory reference
    """
    if not filename or not filename.strip():
        raise InvalidInputError("No filename provided")
    if "/" in filename or "\\" in filename or ".." in filename:
        raise InvalidInputError("Invalid filename")
    return filename


# Derivative names


def thumbnail_name(base: str) -> str:
    return f"{base}{THUMBNAIL_SUFFIX}"


def screenshot_name(base: str, index: int) -> str:
    """Screenshot names are 1-based: ``<base>-thumb-1.png``."""
    return f"{base}{SCREENSHOT_SUFFIX_TEMPLATE.format(index=index)}"


def gif_name(base: str) -> str:
    return f"{base}{GIF_SUFFIX}"


def palette_name(base: str) -> str:
    return f"{base}{PALETTE_SUFFIX}"
