# backend/upload_server/models/health_model.py
"""
Health Check Pydantic Models
"""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class HealthResponse(BaseModel):
    """Liveness plus availability of the external media tools"""

    status: HealthStatus = Field(description="Overall health status")
    timestamp: datetime = Field(description="Health check timestamp")
    service: str = Field(description="Service name")
    version: str = Field(description="Application version")
    tools: Dict[str, bool] = Field(
        default_factory=dict, description="ffmpeg/ffprobe availability"
    )
    storage_writable: bool = Field(description="Upload roots accept writes")
