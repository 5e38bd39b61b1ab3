# backend/upload_server/utils/file_helpers.py
"""
File Helper Functions

Common functions for best-effort file removal and directory creation.
"""

from pathlib import Path
from typing import Iterable, List, Union

from ..enums import LogEmoji, LoggerName
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.UTILITY)


def delete_file_safe(file_path: Union[str, Path]) -> bool:
    """
    Safely delete a file, logging any errors. Returns True if deleted, False otherwise.

    A missing file is not an error; cleanup paths call this for outputs
    that may never have been written.

    Args:
        file_path: Path to the file to delete
    """
    path = Path(file_path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(
            f"Failed to delete file {path}",
            emoji=LogEmoji.ERROR,
            error_context={"operation": "file_delete", "file_path": str(path)},
            exception=e,
        )
        return False

    logger.debug(
        f"Deleted file: {path}",
        emoji=LogEmoji.DELETE,
        extra_context={"operation": "file_delete", "file_path": str(path)},
    )
    return True


def delete_files_safe(file_paths: Iterable[Union[str, Path]]) -> List[str]:
    """Best-effort removal of several files. Returns the names that were removed."""
    return [Path(p).name for p in file_paths if delete_file_safe(p)]


def ensure_directory_exists(directory_path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Returns:
        Path object for the directory
    """
    path = Path(directory_path)
    path.mkdir(parents=True, exist_ok=True)
    return path
