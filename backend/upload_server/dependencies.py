# backend/upload_server/dependencies.py
"""
Dependency injection for the upload server.

Storage, pipeline and upload service are process-wide singletons built
from settings on first use. Tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from .config import Settings, settings
from .models import TokenContent
from .security import get_current_user
from .services.media_pipeline import MediaPipeline, create_media_pipeline
from .services.storage_service import MediaStorage, create_media_storage
from .services.upload_service import UploadService


def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def _media_storage_singleton() -> MediaStorage:
    return create_media_storage(settings)


@lru_cache(maxsize=1)
def _media_pipeline_singleton() -> MediaPipeline:
    return create_media_pipeline(settings)


def get_media_storage() -> MediaStorage:
    """Get MediaStorage singleton configured from settings."""
    return _media_storage_singleton()


def get_media_pipeline() -> MediaPipeline:
    """Get MediaPipeline singleton configured from settings."""
    return _media_pipeline_singleton()


def get_upload_service(
    storage: Annotated[MediaStorage, Depends(get_media_storage)],
    pipeline: Annotated[MediaPipeline, Depends(get_media_pipeline)],
) -> UploadService:
    return UploadService(storage=storage, pipeline=pipeline)


# Type annotations for route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
CurrentUserDep = Annotated[TokenContent, Depends(get_current_user)]
MediaStorageDep = Annotated[MediaStorage, Depends(get_media_storage)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
