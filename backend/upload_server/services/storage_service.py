# backend/upload_server/services/storage_service.py
"""
Media Storage Service

Owns both storage roots: general uploads (originals plus derivatives) and
profile pictures. Handles ingestion of multipart uploads, ownership checks
and the cascade delete of an asset together with its derivatives.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from ..enums import LogEmoji, LoggerName, LogSource, MediaCategory, UploadCategory
from ..exceptions import (
    InvalidInputError,
    NotFoundError,
    PayloadTooLargeError,
    StorageFailureError,
    UnauthorizedError,
)
from ..models import DeleteResult, TokenContent, UploadedAsset
from ..utils.file_helpers import (
    delete_file_safe,
    delete_files_safe,
    ensure_directory_exists,
)
from .logger import get_service_logger
from .media_pipeline.utils.media_types import media_category_for
from .media_pipeline.utils.naming import (
    base_filename,
    generate_stored_filename,
    get_extension,
    is_owned_by,
    validate_plain_filename,
)

logger = get_service_logger(
    LoggerName.STORAGE_SERVICE, LogSource.STORAGE, default_emoji=LogEmoji.STORAGE
)

DEFAULT_CHUNK_SIZE = 1024 * 1024

# MIME categories each storage root accepts
ACCEPTED_CATEGORIES = {
    UploadCategory.GENERAL: {MediaCategory.IMAGE, MediaCategory.VIDEO},
    UploadCategory.PROFILE: {MediaCategory.IMAGE},
}


class MediaStorage:
    """
    Filesystem storage for uploads, with both roots injected.

    Files are never shared between the two roots: a cascade delete only
    scans the general root and profile deletes only touch one file.
    """

    def __init__(
        self,
        upload_root: Path,
        profile_root: Path,
        max_upload_size_bytes: int,
        admin_level_name: str = "Admin",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.upload_root = Path(upload_root)
        self.profile_root = Path(profile_root)
        self.max_upload_size_bytes = max_upload_size_bytes
        self.admin_level_name = admin_level_name
        self.chunk_size = chunk_size

    def root_for(self, category: UploadCategory) -> Path:
        if category == UploadCategory.PROFILE:
            return self.profile_root
        return self.upload_root

    def ensure_directories(self) -> None:
        ensure_directory_exists(self.upload_root)
        ensure_directory_exists(self.profile_root)

    # ====================================================================
    # INGESTION
    # ====================================================================

    async def save_upload(
        self,
        upload: Optional[UploadFile],
        user_id: Optional[int],
        category: UploadCategory = UploadCategory.GENERAL,
    ) -> UploadedAsset:
        """
        Validate a multipart upload and persist it under a generated name.

        Args:
            upload: The ``file`` field of the request
            user_id: Authenticated owner
            category: Storage root to write to

        Returns:
            The stored UploadedAsset

        Raises:
            InvalidInputError: Missing file, undeterminable extension,
                missing identity or unsupported MIME category
            PayloadTooLargeError: If the upload exceeds the size cap
            StorageFailureError: If the file could not be written
        """
        if upload is None or not upload.filename:
            raise InvalidInputError("No valid file")
        if get_extension(upload.filename) is None:
            raise InvalidInputError("Invalid file extension")
        if user_id is None:
            raise InvalidInputError("No user_id provided")

        media_category = media_category_for(upload.content_type)
        if media_category not in ACCEPTED_CATEGORIES[category]:
            raise InvalidInputError("Unsupported media type")

        filename = generate_stored_filename(user_id, upload.filename)
        root = ensure_directory_exists(self.root_for(category))
        target = root / filename

        filesize = await self._write_upload(upload, target)

        logger.info(
            f"Stored upload {filename}",
            emoji=LogEmoji.UPLOAD,
            extra_context={
                "category": category.value,
                "media_type": upload.content_type,
                "filesize": filesize,
                "owner_id": user_id,
            },
        )
        return UploadedAsset(
            filename=filename,
            path=target,
            media_type=upload.content_type,
            filesize=filesize,
            owner_id=user_id,
            category=category,
        )

    async def _write_upload(self, upload: UploadFile, target: Path) -> int:
        written = 0
        try:
            with open(target, "xb") as output:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_upload_size_bytes:
                        raise PayloadTooLargeError()
                    output.write(chunk)
        except PayloadTooLargeError:
            delete_file_safe(target)
            logger.warning(
                f"Rejected upload over {self.max_upload_size_bytes} bytes",
                extra_context={"target": target.name},
            )
            raise
        except OSError as e:
            delete_file_safe(target)
            logger.error(
                f"Failed to write {target.name}",
                exception=e,
                error_context={"target": str(target)},
            )
            raise StorageFailureError() from e
        except asyncio.CancelledError:
            delete_file_safe(target)
            raise
        return written

    def discard(self, asset: UploadedAsset) -> List[str]:
        """
        Best-effort removal of a stored original and everything derived from it.

        Used when processing fails after the original was written.
        """
        if asset.category == UploadCategory.PROFILE:
            removed = delete_files_safe([asset.path])
        else:
            removed = delete_files_safe(
                self.find_related_files(base_filename(asset.filename))
            )

        logger.info(
            f"Discarded {asset.filename}",
            emoji=LogEmoji.CLEANUP,
            extra_context={"removed": removed},
        )
        return removed

    # ====================================================================
    # DELETION
    # ====================================================================

    def find_related_files(self, base: str) -> List[Path]:
        """Regular files in the general root whose name contains ``base``."""
        if not base:
            return []
        try:
            return sorted(
                path
                for path in self.upload_root.iterdir()
                if path.is_file() and base in path.name
            )
        except FileNotFoundError:
            return []

    def is_authorized(self, filename: str, requester: TokenContent) -> bool:
        if requester.level_name == self.admin_level_name:
            return True
        return is_owned_by(filename, requester.user_id)

    def delete_asset(self, filename: str, requester: TokenContent) -> DeleteResult:
        """
        Delete a general upload and every file derived from it.

        Args:
            filename: Stored name of the original
            requester: Authenticated identity

        Returns:
            DeleteResult listing what was removed and what could not be

        Raises:
            InvalidInputError: If the name is not a bare filename
            UnauthorizedError: If the requester neither owns the file nor is admin
            NotFoundError: If the original does not exist
        """
        validate_plain_filename(filename)

        if not self.is_authorized(filename, requester):
            logger.warning(
                f"User {requester.user_id} may not delete {filename}",
                emoji=LogEmoji.SECURITY,
            )
            raise UnauthorizedError()

        base = base_filename(filename)
        if not base:
            raise InvalidInputError("Invalid filename")

        if not (self.upload_root / filename).is_file():
            raise NotFoundError()

        result = DeleteResult(target=filename)
        for path in self.find_related_files(base):
            try:
                path.unlink()
                result.removed.append(path.name)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.error(
                    f"Failed to delete related file {path.name}",
                    exception=e,
                    error_context={"target": filename},
                )
                result.failed.append(path.name)

        logger.info(
            f"Deleted {filename} and its related files",
            emoji=LogEmoji.DELETE,
            extra_context={"removed": result.removed, "failed": result.failed},
        )
        return result

    def delete_profile_file(self, filename: str, user_id: Optional[int]) -> str:
        """
        Delete one profile picture. No derivatives exist for profile uploads.

        Raises:
            InvalidInputError: If the name or user_id is missing or malformed
            UnauthorizedError: If ``user_id`` does not own the file
            NotFoundError: If the file does not exist
            StorageFailureError: If the file could not be removed
        """
        validate_plain_filename(filename)
        if user_id is None:
            raise InvalidInputError("No filename or user_id provided")

        if not is_owned_by(filename, user_id):
            raise UnauthorizedError()

        target = self.profile_root / filename
        if not target.is_file():
            raise NotFoundError()

        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Failed to delete profile file {filename}", exception=e)
            raise StorageFailureError() from e

        logger.info(f"Deleted profile file {filename}", emoji=LogEmoji.DELETE)
        return filename


def create_media_storage(settings) -> MediaStorage:
    """Build storage from application settings."""
    return MediaStorage(
        upload_root=settings.upload_path,
        profile_root=settings.profile_path,
        max_upload_size_bytes=settings.max_upload_size_bytes,
        admin_level_name=settings.admin_level_name,
    )
