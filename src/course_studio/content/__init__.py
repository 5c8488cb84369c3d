"""Content lifecycle — draft registration, byte transfer and finalization."""

from course_studio.content.lifecycle import (
    ContentLifecycleManager,
    IngestState,
    build_content_request,
)

__all__ = ["ContentLifecycleManager", "IngestState", "build_content_request"]
