"""Content models — storage objects registered, uploaded and finalized through the backend."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

DEFAULT_MIME_TYPE = "application/octet-stream"


class ContentStatus(StrEnum):
    DRAFT = "draft"
    FINALIZED = "finalized"
    ARCHIVED = "archived"


class Content(BaseModel):
    """Client-side projection of a backend content record."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    mime_type: str = DEFAULT_MIME_TYPE
    size_bytes: int = 0
    storage_key: str = ""
    status: ContentStatus = ContentStatus.DRAFT
    metadata: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_finalized(self) -> bool:
        return self.status == ContentStatus.FINALIZED


class ContentRequest(BaseModel):
    """Body of the register and finalize calls."""

    name: str
    mime_type: str = DEFAULT_MIME_TYPE
    size_bytes: int
    metadata: dict[str, Any] | None = None


class UploadTarget(BaseModel):
    """Single-use signed upload URL tied to one draft content."""

    model_config = ConfigDict(extra="ignore")

    upload_url: str
    content: Content
    expires_at: datetime | None = None


class DownloadLink(BaseModel):
    model_config = ConfigDict(extra="ignore")

    download_url: str
    expires_at: datetime | None = None
