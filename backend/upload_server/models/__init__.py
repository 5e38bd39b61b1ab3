"""
Upload Server Pydantic Models Package

Models for stored assets, derivatives, auth claims and API responses.
"""

from .health_model import HealthResponse, HealthStatus
from .upload_model import (
    DeleteResult,
    DerivativeSet,
    MessageResponse,
    ProbeResult,
    ProfileDeleteRequest,
    TokenContent,
    UploadData,
    UploadedAsset,
    UploadResponse,
)

__all__ = [
    "HealthResponse",
    "HealthStatus",
    "DeleteResult",
    "DerivativeSet",
    "MessageResponse",
    "ProbeResult",
    "ProfileDeleteRequest",
    "TokenContent",
    "UploadData",
    "UploadedAsset",
    "UploadResponse",
]
