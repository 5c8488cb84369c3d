"""Course module models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ModuleType(StrEnum):
    PDF = "pdf"
    VIDEO = "video"
    AUDIO = "audio"
    ARTICLE = "article"
    DOCUMENT = "document"
    QUIZ = "quiz"
    SCORM = "scorm"


def detect_module_type(mime_type: str) -> ModuleType | None:
    """Guess a module type from a file's MIME type, or None when nothing matches."""
    lower = mime_type.lower()
    if "video" in lower:
        return ModuleType.VIDEO
    if "audio" in lower:
        return ModuleType.AUDIO
    if "pdf" in lower:
        return ModuleType.PDF
    if "html" in lower or "text" in lower:
        return ModuleType.ARTICLE
    if "zip" in lower:
        return ModuleType.SCORM
    return None


class ModuleRequest(BaseModel):
    """Body of the module create and update calls."""

    title: str
    module_type: ModuleType
    content_id: str | None = None
    duration_seconds: int | None = None
    data: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize, omitting optional fields that were never set."""
        return self.model_dump(mode="json", exclude_none=True)


class Module(BaseModel):
    """Client-side projection of a course module."""

    model_config = ConfigDict(extra="ignore")

    id: str
    course_id: str
    title: str
    module_type: str
    content_id: str | None = None
    position: int = 0
    duration_seconds: int = 0
    status: str = ""
    data: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
