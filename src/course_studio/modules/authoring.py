"""Module authoring — from a draft filled in by an author to a created course module."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from course_studio.errors import SourceValidationError, ValidationKind
from course_studio.models.module import Module, ModuleRequest, ModuleType, detect_module_type
from course_studio.models.sources import (
    EmbeddedVideo,
    ExistingContent,
    InlineText,
    ModuleSourcePayload,
    SourceMode,
    UploadedContent,
    module_fields,
)
from course_studio.modules.sources import SourceInputs

if TYPE_CHECKING:
    from collections.abc import Callable

    from course_studio.api.backend import Backend
    from course_studio.modules.sources import ModuleSourceResolver

logger = logging.getLogger(__name__)

_DEFAULT_MODULE_TYPE = ModuleType.ARTICLE


class AuthoringContext:
    """Liveness of the surface (dialog, page) that started an authoring action.

    Closing the context does not cancel operations already in flight; their
    progress and results are dropped instead.
    """

    def __init__(self) -> None:
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def guard(self, callback: Callable[[int], None] | None) -> Callable[[int], None] | None:
        """Wrap ``callback`` so it stops firing once the context is closed."""
        if callback is None:
            return None

        def guarded(percent: int) -> None:
            if self._open:
                callback(percent)

        return guarded


@dataclass
class ModuleDraft:
    title: str
    mode: SourceMode
    inputs: SourceInputs = field(default_factory=SourceInputs)
    module_type: ModuleType | None = None
    duration_minutes: int | str | None = None


def duration_seconds(minutes: int | str | None) -> int | None:
    """Convert an estimated duration in minutes to seconds; ignore anything not positive."""
    if minutes is None:
        return None
    try:
        value = int(str(minutes).strip())
    except ValueError:
        return None
    return value * 60 if value > 0 else None


class ModuleAuthor:
    """Resolves a draft's source and creates the module on the backend."""

    def __init__(self, backend: Backend, resolver: ModuleSourceResolver) -> None:
        self._backend = backend
        self._resolver = resolver

    async def create_module(
        self,
        course_id: str,
        draft: ModuleDraft,
        *,
        context: AuthoringContext | None = None,
        on_progress: Callable[[int], None] | None = None,
    ) -> Module | None:
        """Create the module described by ``draft``.

        Returns None when ``context`` was closed before the module could be
        created or before its result came back.
        """
        title = draft.title.strip()
        if not title:
            raise SourceValidationError(ValidationKind.MISSING_TITLE)
        context = context or AuthoringContext()
        if not context.is_open:
            logger.info("Authoring context already closed — course=%s title=%s", course_id, title)
            return None

        payload = await self._resolver.resolve(
            draft.mode,
            draft.inputs,
            on_progress=context.guard(on_progress),
        )
        if not context.is_open:
            logger.info(
                "Authoring context closed after source resolution — course=%s title=%s",
                course_id,
                title,
            )
            return None

        request = ModuleRequest(
            title=title,
            module_type=self._module_type(draft, payload),
            duration_seconds=duration_seconds(draft.duration_minutes),
            **module_fields(payload),
        )
        module = await self._backend.create_module(course_id, request)
        if not context.is_open:
            logger.info("Dropping late module result — course=%s module=%s", course_id, module.id)
            return None
        return module

    @staticmethod
    def _module_type(draft: ModuleDraft, payload: ModuleSourcePayload) -> ModuleType:
        if draft.module_type is not None:
            return draft.module_type
        match payload:
            case UploadedContent():
                file = draft.inputs.file
                detected = detect_module_type(file.mime_type) if file is not None else None
                return detected or ModuleType.DOCUMENT
            case EmbeddedVideo():
                return ModuleType.VIDEO
            case InlineText():
                return ModuleType.ARTICLE
            case ExistingContent():
                return _DEFAULT_MODULE_TYPE
