"""Module source resolution — one authoring mode in, one source payload out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from html.parser import HTMLParser
from typing import TYPE_CHECKING, assert_never

from course_studio.errors import SourceValidationError, ValidationKind
from course_studio.models.sources import (
    EmbeddedVideo,
    ExistingContent,
    InlineText,
    ModuleSourcePayload,
    RichTextData,
    SourceMode,
    UploadedContent,
    VideoData,
)
from course_studio.modules.embed import normalize_embed_url

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from course_studio.content.lifecycle import ContentLifecycleManager
    from course_studio.models.content import Content
    from course_studio.models.files import SourceFile

logger = logging.getLogger(__name__)


@dataclass
class SourceInputs:
    """Everything an authoring form may have collected, across all modes."""

    content_id: str | None = None
    file: SourceFile | None = None
    content_name: str | None = None
    video_url: str | None = None
    html: str | None = None


_MODE_FIELDS: dict[SourceMode, frozenset[str]] = {
    SourceMode.EXISTING_CONTENT: frozenset({"content_id"}),
    SourceMode.UPLOAD: frozenset({"file", "content_name"}),
    SourceMode.EMBEDDED_VIDEO: frozenset({"video_url"}),
    SourceMode.INLINE_TEXT: frozenset({"html"}),
}


def _is_set(value: object) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


class _TextExtractor(HTMLParser):
    _SKIPPED_TAGS = frozenset({"script", "style"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self._SKIPPED_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in self._SKIPPED_TAGS and self._skip_depth:
            self._skip_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self.parts.append(data)


def visible_text(html: str) -> str:
    """Return the text a reader would see in ``html``, with tags and entities resolved."""
    parser = _TextExtractor()
    parser.feed(html)
    parser.close()
    return "".join(parser.parts).replace("\xa0", " ").strip()


class ModuleSourceResolver:
    """Turns the inputs of one authoring mode into a module source payload."""

    def __init__(
        self,
        lifecycle: ContentLifecycleManager,
        *,
        catalog: Iterable[Content] | None = None,
    ) -> None:
        self._lifecycle = lifecycle
        self._catalog = None if catalog is None else {content.id: content for content in catalog}

    async def resolve(
        self,
        mode: SourceMode | str,
        inputs: SourceInputs,
        *,
        on_progress: Callable[[int], None] | None = None,
    ) -> ModuleSourcePayload:
        """Validate ``inputs`` for ``mode`` and build its payload.

        Upload mode ingests the file before returning. Validation failures raise
        ``SourceValidationError`` without any backend call.
        """
        mode = SourceMode(mode)
        self._reject_foreign_inputs(mode, inputs)

        payload: ModuleSourcePayload
        match mode:
            case SourceMode.EXISTING_CONTENT:
                payload = self._resolve_existing(inputs)
            case SourceMode.UPLOAD:
                payload = await self._resolve_upload(inputs, on_progress)
            case SourceMode.EMBEDDED_VIDEO:
                payload = self._resolve_video(inputs)
            case SourceMode.INLINE_TEXT:
                payload = self._resolve_text(inputs)
            case _:
                assert_never(mode)
        logger.debug("Module source resolved — mode=%s", mode)
        return payload

    @staticmethod
    def _reject_foreign_inputs(mode: SourceMode, inputs: SourceInputs) -> None:
        allowed = _MODE_FIELDS[mode]
        foreign = sorted(
            field.name
            for field in fields(inputs)
            if field.name not in allowed and _is_set(getattr(inputs, field.name))
        )
        if foreign:
            raise SourceValidationError(
                ValidationKind.MIXED_INPUTS,
                f"Inputs {', '.join(foreign)} do not belong to mode {mode}",
            )

    def _resolve_existing(self, inputs: SourceInputs) -> ExistingContent:
        content_id = (inputs.content_id or "").strip()
        if not content_id:
            raise SourceValidationError(ValidationKind.MISSING_SELECTION)
        if self._catalog is not None:
            content = self._catalog.get(content_id)
            if content is None or not content.is_finalized:
                raise SourceValidationError(
                    ValidationKind.MISSING_SELECTION,
                    f"Content {content_id} is not available for modules",
                )
        return ExistingContent(content_id=content_id)

    async def _resolve_upload(
        self,
        inputs: SourceInputs,
        on_progress: Callable[[int], None] | None,
    ) -> UploadedContent:
        if inputs.file is None:
            raise SourceValidationError(ValidationKind.MISSING_FILE)
        content = await self._lifecycle.ingest(
            inputs.file,
            name=inputs.content_name,
            on_progress=on_progress,
        )
        if self._catalog is not None:
            self._catalog[content.id] = content
        return UploadedContent(content_id=content.id)

    @staticmethod
    def _resolve_video(inputs: SourceInputs) -> EmbeddedVideo:
        url = (inputs.video_url or "").strip()
        embed_url = normalize_embed_url(url) if url else None
        if embed_url is None:
            raise SourceValidationError(ValidationKind.INVALID_VIDEO_URL)
        return EmbeddedVideo(data=VideoData(url=url, embed_url=embed_url))

    @staticmethod
    def _resolve_text(inputs: SourceInputs) -> InlineText:
        html = (inputs.html or "").strip()
        if not html or not visible_text(html):
            raise SourceValidationError(ValidationKind.EMPTY_TEXT)
        return InlineText(data=RichTextData(html=html))
