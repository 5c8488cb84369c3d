"""Wiring helpers — build the core components for one authenticated session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from course_studio.api.backend import Backend
from course_studio.api.client import RequestClient
from course_studio.content.lifecycle import ContentLifecycleManager
from course_studio.modules.authoring import ModuleAuthor
from course_studio.modules.sources import ModuleSourceResolver
from course_studio.uploads.transport import UploadTransport

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    import httpx

    from course_studio.config import Settings
    from course_studio.models.content import Content

logger = logging.getLogger(__name__)


@dataclass
class Core:
    """The request/upload core for one session, sharing a single request client."""

    client: RequestClient
    backend: Backend
    transport: UploadTransport
    lifecycle: ContentLifecycleManager

    def resolver(self, catalog: Iterable[Content] | None = None) -> ModuleSourceResolver:
        return ModuleSourceResolver(self.lifecycle, catalog=catalog)

    def author(self, catalog: Iterable[Content] | None = None) -> ModuleAuthor:
        return ModuleAuthor(self.backend, self.resolver(catalog))

    async def close(self) -> None:
        await self.transport.close()
        await self.client.close()


def init_core(
    settings: Settings,
    *,
    on_session_expired: Callable[[], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    upload_http: httpx.AsyncClient | None = None,
) -> Core:
    """Create the client, backend wrapper, upload transport and lifecycle manager."""
    client = RequestClient(settings.api, transport=transport, on_session_expired=on_session_expired)
    backend = Backend(client)
    upload_transport = UploadTransport(client, settings.upload, http=upload_http)
    lifecycle = ContentLifecycleManager(backend, upload_transport)
    logger.info(
        "Core initialized — api=%s org=%s direct_uploads=%s",
        settings.api.base_url,
        settings.api.organization_id or "-",
        settings.upload.direct_enabled,
    )
    return Core(client=client, backend=backend, transport=upload_transport, lifecycle=lifecycle)
