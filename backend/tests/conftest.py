#!/usr/bin/env python3
# backend/tests/conftest.py
"""
Pytest configuration and shared fixtures for the upload server tests.
"""

import os
import shutil
import tempfile

# Settings are read from the environment at import time
_SESSION_ROOT = tempfile.mkdtemp(prefix="upload-server-tests-")
os.environ.setdefault("UPLOAD_DIRECTORY", os.path.join(_SESSION_ROOT, "uploads"))
os.environ.setdefault(
    "PROFILE_DIRECTORY", os.path.join(_SESSION_ROOT, "uploads", "profile")
)
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import io  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi import UploadFile  # noqa: E402
from PIL import Image  # noqa: E402
from starlette.datastructures import Headers  # noqa: E402

from upload_server.security import create_access_token  # noqa: E402
from upload_server.services.storage_service import MediaStorage  # noqa: E402

MAX_TEST_UPLOAD_BYTES = 5 * 1024 * 1024


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_SESSION_ROOT, ignore_errors=True)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def upload_root(temp_dir) -> Path:
    root = temp_dir / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def profile_root(upload_root) -> Path:
    root = upload_root / "profile"
    root.mkdir()
    return root


@pytest.fixture
def storage(upload_root, profile_root) -> MediaStorage:
    """MediaStorage bound to per-test directories."""
    return MediaStorage(
        upload_root=upload_root,
        profile_root=profile_root,
        max_upload_size_bytes=MAX_TEST_UPLOAD_BYTES,
        admin_level_name="Admin",
    )


@pytest.fixture
def make_token():
    """Factory for bearer tokens signed with the test secret."""

    def _make_token(user_id: int = 7, level_name: str = "User", **kwargs) -> str:
        return create_access_token(user_id, level_name, **kwargs)

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    """Factory for Authorization headers."""

    def _auth_headers(user_id: int = 7, level_name: str = "User") -> dict:
        return {"Authorization": f"Bearer {make_token(user_id, level_name)}"}

    return _auth_headers


def create_test_image(
    path: Path,
    size: Tuple[int, int] = (640, 480),
    mode: str = "RGB",
    image_format: str = "PNG",
) -> Path:
    """Write a solid-colour test image and return its path."""
    color = (200, 120, 40) if mode == "RGB" else None
    image = Image.new(mode, size, color)
    image.save(path, image_format)
    return path


def image_bytes(
    size: Tuple[int, int] = (640, 480), image_format: str = "PNG"
) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (30, 160, 90)).save(buffer, image_format)
    return buffer.getvalue()


def make_upload_file(
    data: bytes, filename: str = "photo.png", content_type: str = "image/png"
) -> UploadFile:
    """Build an UploadFile the way FastAPI hands one to a route."""
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def image_factory():
    """Fixture form of create_test_image."""
    return create_test_image


@pytest.fixture
def upload_factory():
    """Fixture form of make_upload_file."""
    return make_upload_file


@pytest.fixture
def png_bytes():
    """Factory for encoded PNG payloads."""
    return image_bytes
