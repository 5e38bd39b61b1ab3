# backend/upload_server/models/upload_model.py
"""
Upload Pydantic Models

Models for stored assets, their derivatives and the upload/delete API
responses.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import UploadCategory


class TokenContent(BaseModel):
    """Claims carried by a bearer token issued by the auth service"""

    user_id: int = Field(description="Authenticated user id")
    level_name: str = Field(description="User level, e.g. 'User' or 'Admin'")
    exp: Optional[int] = Field(None, description="Expiry as a unix timestamp")
    model_config = ConfigDict(extra="ignore")


class UploadedAsset(BaseModel):
    """A raw upload persisted to disk. Immutable once created."""

    filename: str = Field(description="Stored name: <random20>_<user_id>.<ext>")
    path: Path = Field(description="Absolute or root-relative location on disk")
    media_type: str = Field(description="MIME type declared by the client")
    filesize: int = Field(ge=0, description="Bytes written")
    owner_id: int = Field(description="User id encoded in the filename")
    category: UploadCategory = Field(default=UploadCategory.GENERAL)
    model_config = ConfigDict(frozen=True)


class ProbeResult(BaseModel):
    """Duration reported by ffprobe, after fallback handling"""

    duration_seconds: float = Field(gt=0)
    fallback_used: bool = False
    raw_duration: Optional[str] = Field(
        None, description="Value the container reported, if any"
    )


class DerivativeSet(BaseModel):
    """Derivatives produced for one upload. The palette is never exposed."""

    thumbnail: Optional[str] = None
    screenshots: List[str] = Field(default_factory=list)
    gif: Optional[str] = None


class UploadData(BaseModel):
    """Payload of a successful upload"""

    filename: str
    media_type: str
    filesize: int
    thumbnail: Optional[str] = None
    screenshots: Optional[List[str]] = None
    gif: Optional[str] = None

    @classmethod
    def from_asset(
        cls, asset: UploadedAsset, derivatives: Optional[DerivativeSet] = None
    ) -> "UploadData":
        data = cls(
            filename=asset.filename,
            media_type=asset.media_type,
            filesize=asset.filesize,
        )
        if derivatives is None:
            return data
        if derivatives.thumbnail is not None:
            data.thumbnail = derivatives.thumbnail
        if derivatives.screenshots:
            data.screenshots = derivatives.screenshots
            # gif only applies to videos, where null means the preview degraded
            data.gif = derivatives.gif
        return data


class UploadResponse(BaseModel):
    """Response model for upload endpoints"""

    message: str = "File uploaded"
    data: UploadData


class MessageResponse(BaseModel):
    """Plain message response used by delete endpoints"""

    message: str


class DeleteResult(BaseModel):
    """Files removed by a cascade delete"""

    target: str
    removed: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)


class ProfileDeleteRequest(BaseModel):
    """Body of a profile picture delete request"""

    user_id: int = Field(description="Owner of the profile picture")
