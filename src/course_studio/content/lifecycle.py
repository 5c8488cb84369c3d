"""Content ingest — register a draft, transfer its bytes, finalize it."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from course_studio.errors import ApiError, FinalizeError, RegistrationError
from course_studio.models.content import DEFAULT_MIME_TYPE, Content, ContentRequest

if TYPE_CHECKING:
    from collections.abc import Callable

    from course_studio.api.backend import Backend
    from course_studio.models.files import SourceFile
    from course_studio.uploads.transport import UploadTransport

logger = logging.getLogger(__name__)


class IngestState(StrEnum):
    REQUESTED = "requested"
    REGISTERED = "registered"
    TRANSFERRED = "transferred"
    FINALIZED = "finalized"


def build_content_request(
    file: SourceFile,
    *,
    name: str | None = None,
    mime_type: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ContentRequest:
    """Describe ``file`` for the register and finalize calls.

    Blank names fall back to the file's own name and unknown MIME types to the
    generic binary type. The size always comes from the file on disk.
    """
    try:
        size_bytes = file.size_bytes
    except OSError as exc:
        raise RegistrationError(f"Cannot read {file.path}: {exc}") from exc
    return ContentRequest(
        name=(name or "").strip() or file.name,
        mime_type=mime_type or file.mime_type or DEFAULT_MIME_TYPE,
        size_bytes=size_bytes,
        metadata=metadata,
    )


class ContentLifecycleManager:
    """Drives one content item from registration to finalization.

    Any failed step aborts the ingest. Calling ``ingest`` again starts over with
    a brand-new draft; drafts left behind by failed ingests are the backend's
    to clean up.
    """

    def __init__(self, backend: Backend, transport: UploadTransport) -> None:
        self._backend = backend
        self._transport = transport

    async def ingest(
        self,
        file: SourceFile,
        *,
        name: str | None = None,
        mime_type: str | None = None,
        on_progress: Callable[[int], None] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Content:
        """Upload ``file`` as a new content item and return it finalized."""
        request = build_content_request(file, name=name, mime_type=mime_type, metadata=metadata)
        self._log_state(IngestState.REQUESTED, request.name)

        try:
            target = await self._backend.create_content(request)
        except (ApiError, ValidationError) as exc:
            raise RegistrationError(
                f"Could not register content: {exc}",
                cause=_api_cause(exc),
            ) from exc
        content_id = target.content.id
        self._log_state(IngestState.REGISTERED, request.name, content_id=content_id)

        await self._transport.transfer(target.upload_url, file, on_progress)
        self._log_state(IngestState.TRANSFERRED, request.name, content_id=content_id)

        try:
            content = await self._backend.finalize_content(content_id, request)
        except (ApiError, ValidationError) as exc:
            logger.error("Content bytes stored but finalize failed — content=%s", content_id)
            raise FinalizeError(
                f"Could not finalize content {content_id}: {exc}",
                content_id=content_id,
                cause=_api_cause(exc),
            ) from exc
        if not content.is_finalized:
            raise FinalizeError(
                f"Content {content_id} is still {content.status} after finalize",
                content_id=content_id,
            )

        self._log_state(IngestState.FINALIZED, request.name, content_id=content_id)
        return content

    @staticmethod
    def _log_state(state: IngestState, name: str, *, content_id: str | None = None) -> None:
        logger.info("Content ingest %s — name=%s content=%s", state, name, content_id or "-")


def _api_cause(exc: Exception) -> ApiError | None:
    return exc if isinstance(exc, ApiError) else None
