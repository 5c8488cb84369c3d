"""Module authoring — source resolution, video embedding and module creation."""

from course_studio.modules.authoring import (
    AuthoringContext,
    ModuleAuthor,
    ModuleDraft,
    duration_seconds,
)
from course_studio.modules.embed import extract_video_id, normalize_embed_url
from course_studio.modules.sources import ModuleSourceResolver, SourceInputs, visible_text

__all__ = [
    "AuthoringContext",
    "ModuleAuthor",
    "ModuleDraft",
    "ModuleSourceResolver",
    "SourceInputs",
    "duration_seconds",
    "extract_video_id",
    "normalize_embed_url",
    "visible_text",
]
