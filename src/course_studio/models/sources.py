"""Module source payloads — one closed variant per authoring mode."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class SourceMode(StrEnum):
    EXISTING_CONTENT = "existing-content"
    UPLOAD = "upload"
    EMBEDDED_VIDEO = "embedded-video"
    INLINE_TEXT = "inline-text"


class VideoData(BaseModel):
    kind: Literal["youtube"] = "youtube"
    url: str
    embed_url: str


class RichTextData(BaseModel):
    kind: Literal["richtext"] = "richtext"
    html: str


class ExistingContent(BaseModel):
    kind: Literal[SourceMode.EXISTING_CONTENT] = SourceMode.EXISTING_CONTENT
    content_id: str


class UploadedContent(BaseModel):
    kind: Literal[SourceMode.UPLOAD] = SourceMode.UPLOAD
    content_id: str


class EmbeddedVideo(BaseModel):
    kind: Literal[SourceMode.EMBEDDED_VIDEO] = SourceMode.EMBEDDED_VIDEO
    data: VideoData


class InlineText(BaseModel):
    kind: Literal[SourceMode.INLINE_TEXT] = SourceMode.INLINE_TEXT
    data: RichTextData


ModuleSourcePayload = Annotated[
    ExistingContent | UploadedContent | EmbeddedVideo | InlineText,
    Field(discriminator="kind"),
]


def module_fields(payload: ModuleSourcePayload) -> dict[str, Any]:
    """Return the module-creation fields contributed by a source payload."""
    match payload:
        case ExistingContent(content_id=content_id) | UploadedContent(content_id=content_id):
            return {"content_id": content_id}
        case EmbeddedVideo(data=data) | InlineText(data=data):
            return {"data": data.model_dump(mode="json")}
