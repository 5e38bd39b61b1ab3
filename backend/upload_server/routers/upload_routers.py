# backend/upload_server/routers/upload_routers.py
"""
Upload and delete HTTP endpoints.

Role: Media ingestion and removal
Responsibilities: Accept multipart uploads, run derivative generation,
                  delete assets with their derivatives, manage profile pictures
Interactions: UploadService for ingestion + pipeline, MediaStorage for deletes
"""

from typing import Annotated, Optional

from fastapi import APIRouter, File, Request, UploadFile

from ..dependencies import (
    CurrentUserDep,
    MediaStorageDep,
    SettingsDep,
    UploadServiceDep,
)
from ..exceptions import UnauthorizedError
from ..models import MessageResponse, ProfileDeleteRequest, UploadResponse
from ..utils.router_helpers import handle_exceptions, run_until_disconnected

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
@handle_exceptions("upload file")
async def upload_file(
    request: Request,
    user: CurrentUserDep,
    upload_service: UploadServiceDep,
    file: Annotated[Optional[UploadFile], File()] = None,
) -> UploadResponse:
    """
    Store an image or video and generate its derivatives.

    Images get ``thumbnail``; videos get ``screenshots`` and ``gif``
    (``null`` when the animated preview could not be produced).
    """
    data = await run_until_disconnected(
        request, upload_service.upload_media(file, user)
    )
    return UploadResponse(message="File uploaded", data=data)


@router.post("/upload/profile", response_model=UploadResponse)
@handle_exceptions("upload profile picture")
async def upload_profile_picture(
    user: CurrentUserDep,
    upload_service: UploadServiceDep,
    file: Annotated[Optional[UploadFile], File()] = None,
) -> UploadResponse:
    """Store a profile picture. Images only, no derivatives."""
    data = await upload_service.upload_profile_picture(file, user)
    return UploadResponse(message="File uploaded", data=data)


@router.delete("/delete/profile/{filename}", response_model=MessageResponse)
@handle_exceptions("delete profile picture")
async def delete_profile_file(
    filename: str,
    body: ProfileDeleteRequest,
    user: CurrentUserDep,
    storage: MediaStorageDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Delete one profile picture owned by ``user_id``."""
    if user.level_name != settings.admin_level_name and user.user_id != body.user_id:
        raise UnauthorizedError()

    storage.delete_profile_file(filename, body.user_id)
    return MessageResponse(message="File deleted")


@router.delete("/delete/{filename}", response_model=MessageResponse)
@handle_exceptions("delete file")
async def delete_file(
    filename: str,
    user: CurrentUserDep,
    storage: MediaStorageDep,
) -> MessageResponse:
    """Delete an upload and every derivative generated from it."""
    storage.delete_asset(filename, user)
    return MessageResponse(message="File and related files deleted")
