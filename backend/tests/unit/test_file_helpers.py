#!/usr/bin/env python3
"""
Unit tests for the best-effort file helpers used by cleanup paths.
"""

import pytest

from upload_server.utils.file_helpers import (
    delete_file_safe,
    delete_files_safe,
    ensure_directory_exists,
)


@pytest.mark.unit
@pytest.mark.storage
class TestFileHelpers:
    def test_delete_existing_file(self, temp_dir):
        target = temp_dir / "abc_7-thumb.png"
        target.write_bytes(b"thumb")

        assert delete_file_safe(target) is True
        assert not target.exists()

    def test_delete_missing_file_is_not_an_error(self, temp_dir):
        assert delete_file_safe(temp_dir / "never-written.png") is False

    def test_delete_directory_reports_failure(self, temp_dir):
        directory = ensure_directory_exists(temp_dir / "nested")

        assert delete_file_safe(directory) is False
        assert directory.is_dir()

    def test_delete_files_returns_removed_names(self, temp_dir):
        written = temp_dir / "abc_7-thumb-1.png"
        written.write_bytes(b"frame")

        removed = delete_files_safe(
            [written, temp_dir / "abc_7-thumb-2.png", str(temp_dir / "abc_7-thumb-3.png")]
        )

        assert removed == ["abc_7-thumb-1.png"]
        assert list(temp_dir.iterdir()) == []

    def test_ensure_directory_creates_parents(self, temp_dir):
        path = ensure_directory_exists(str(temp_dir / "uploads" / "profile"))

        assert path == temp_dir / "uploads" / "profile"
        assert path.is_dir()

    def test_ensure_directory_is_idempotent(self, temp_dir):
        first = ensure_directory_exists(temp_dir / "uploads")
        second = ensure_directory_exists(temp_dir / "uploads")

        assert first == second
        assert second.is_dir()
