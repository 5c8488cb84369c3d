"""Data models exchanged with the backend and between core components."""

from course_studio.models.content import (
    DEFAULT_MIME_TYPE,
    Content,
    ContentRequest,
    ContentStatus,
    DownloadLink,
    UploadTarget,
)
from course_studio.models.files import SourceFile
from course_studio.models.module import Module, ModuleRequest, ModuleType, detect_module_type
from course_studio.models.sources import (
    EmbeddedVideo,
    ExistingContent,
    InlineText,
    ModuleSourcePayload,
    RichTextData,
    SourceMode,
    UploadedContent,
    VideoData,
    module_fields,
)

__all__ = [
    "DEFAULT_MIME_TYPE",
    "Content",
    "ContentRequest",
    "ContentStatus",
    "DownloadLink",
    "EmbeddedVideo",
    "ExistingContent",
    "InlineText",
    "Module",
    "ModuleRequest",
    "ModuleSourcePayload",
    "ModuleType",
    "RichTextData",
    "SourceFile",
    "SourceMode",
    "UploadTarget",
    "UploadedContent",
    "VideoData",
    "detect_module_type",
    "module_fields",
]
