"""Typed wrappers over the backend's content and module endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from course_studio.models.content import Content, ContentRequest, DownloadLink, UploadTarget
from course_studio.models.module import Module, ModuleRequest

if TYPE_CHECKING:
    from course_studio.api.client import RequestClient

logger = logging.getLogger(__name__)


class Backend:
    """Content and module calls scoped to one organization."""

    def __init__(self, client: RequestClient, organization_id: str | None = None) -> None:
        self._client = client
        self._org_id = organization_id or client.organization_id

    @property
    def client(self) -> RequestClient:
        return self._client

    async def _call(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        return await self._client.call(method, endpoint, organization_id=self._org_id, **kwargs)

    # -- auth ---------------------------------------------------------------

    async def me(self) -> dict[str, Any]:
        return await self._call("GET", "auth/me")

    # -- contents -----------------------------------------------------------

    async def list_contents(self) -> list[Content]:
        items = await self._call("GET", "contents")
        return [Content.model_validate(item) for item in items or []]

    async def create_content(self, request: ContentRequest) -> UploadTarget:
        """Register a draft content and obtain its signed upload URL."""
        body = await self._call(
            "POST",
            "contents",
            json=request.model_dump(mode="json", exclude_none=True),
        )
        return UploadTarget.model_validate(body)

    async def get_content(self, content_id: str) -> Content:
        return Content.model_validate(await self._call("GET", f"contents/{content_id}"))

    async def finalize_content(self, content_id: str, request: ContentRequest) -> Content:
        body = await self._call(
            "POST",
            f"contents/{content_id}/finalize",
            json=request.model_dump(mode="json", exclude_none=True),
        )
        return Content.model_validate(body)

    async def archive_content(self, content_id: str) -> None:
        await self._call("DELETE", f"contents/{content_id}")

    async def get_download_link(self, content_id: str) -> DownloadLink:
        body = await self._call("GET", f"contents/{content_id}/download")
        return DownloadLink.model_validate(body)

    # -- modules ------------------------------------------------------------

    async def list_modules(self, course_id: str) -> list[Module]:
        items = await self._call("GET", f"courses/{course_id}/modules")
        return [Module.model_validate(item) for item in items or []]

    async def create_module(self, course_id: str, request: ModuleRequest) -> Module:
        body = await self._call("POST", f"courses/{course_id}/modules", json=request.to_payload())
        module = Module.model_validate(body)
        logger.info(
            "Module created — course=%s module=%s type=%s",
            course_id,
            module.id,
            module.module_type,
        )
        return module

    async def update_module(self, module_id: str, request: ModuleRequest) -> Module:
        body = await self._call("PATCH", f"courses/modules/{module_id}", json=request.to_payload())
        return Module.model_validate(body)

    async def delete_module(self, module_id: str) -> None:
        await self._call("DELETE", f"courses/modules/{module_id}")

    async def reorder_modules(self, course_id: str, module_ids: list[str]) -> None:
        await self._call(
            "POST",
            f"courses/{course_id}/modules/reorder",
            json={"module_ids": module_ids},
        )
