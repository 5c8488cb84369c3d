"""Shared fixtures for course-studio tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from course_studio.config import ApiConfig, UploadConfig
from course_studio.models.files import SourceFile

if TYPE_CHECKING:
    from pathlib import Path

FILE_BYTES = b"0123456789abcdef"


@pytest.fixture
def api_config() -> ApiConfig:
    """API config pointing at the in-memory test backend."""
    return ApiConfig(base_url="http://testserver/api", organization_id="org-1", timeout_seconds=5.0)


@pytest.fixture
def upload_config() -> UploadConfig:
    """Upload config with a small chunk size so progress is reported several times."""
    return UploadConfig(
        direct_enabled=True,
        relay_url="/internal/upload-proxy",
        chunk_size=4,
        timeout_seconds=5.0,
    )


@pytest.fixture
def source_file(tmp_path: Path) -> SourceFile:
    """A 16-byte PDF on disk."""
    path = tmp_path / "lesson.pdf"
    path.write_bytes(FILE_BYTES)
    return SourceFile(path)
