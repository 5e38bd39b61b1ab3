# backend/upload_server/routers/__init__.py
"""
API routers for the upload server.
"""

from .health_routers import router as health_router
from .upload_routers import router as upload_router

__all__ = ["health_router", "upload_router"]
