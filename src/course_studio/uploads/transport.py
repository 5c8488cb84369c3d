"""Dual-strategy file transfer to signed storage URLs.

Files are streamed straight to the storage URL when the direct strategy is
available. When that attempt fails for any reason, the transfer is repeated
through the same-origin relay, which performs the PUT on the caller's behalf.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

from course_studio.errors import ApiError, BackendError, UploadError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from course_studio.api.client import RequestClient
    from course_studio.config import UploadConfig
    from course_studio.models.files import SourceFile

logger = logging.getLogger(__name__)

_DIRECT_SCHEMES = ("http", "https")


class TransferStrategy(StrEnum):
    DIRECT = "direct"
    RELAYED = "relayed"


@dataclass
class UploadSession:
    """State of one transfer attempt; discarded once the attempt ends."""

    file: SourceFile
    target_url: str
    strategy: TransferStrategy
    on_progress: Callable[[int], None] | None = None
    progress_percent: int = 0

    def report(self, percent: int, *, force: bool = False) -> None:
        """Forward progress, never letting it move backwards within the session."""
        percent = max(0, min(100, percent))
        if percent < self.progress_percent or (percent == self.progress_percent and not force):
            return
        self.progress_percent = percent
        if self.on_progress is not None:
            self.on_progress(percent)


class UploadTransport:
    """Moves a local file's bytes to a storage URL, directly or via the relay."""

    def __init__(
        self,
        client: RequestClient,
        config: UploadConfig,
        *,
        http: httpx.AsyncClient | None = None,
        probe: Callable[[], bool] | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=config.timeout_seconds)
        self._probe = probe or (lambda: config.direct_enabled)
        self._direct_capable: bool | None = None

    @property
    def relay_url(self) -> str:
        url = self._config.relay_url
        if urlparse(url).scheme:
            return url
        return self._client.same_origin_url(url)

    def strategy(self) -> TransferStrategy:
        """Return the first strategy to try, probing the direct path once per transport."""
        if self._direct_capable is None:
            self._direct_capable = bool(self._probe())
            logger.debug("Direct upload capability probed — capable=%s", self._direct_capable)
        return TransferStrategy.DIRECT if self._direct_capable else TransferStrategy.RELAYED

    async def transfer(
        self,
        target_url: str,
        file: SourceFile,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        """Upload ``file`` to ``target_url``.

        Raises ``UploadError`` only when the relayed transfer fails as well.
        """
        if self.strategy() is TransferStrategy.DIRECT:
            session = UploadSession(file, target_url, TransferStrategy.DIRECT, on_progress)
            if await self._transfer_direct(session):
                return
            logger.warning("Direct upload failed, falling back to relay — file=%s", file.name)

        session = UploadSession(file, target_url, TransferStrategy.RELAYED, on_progress)
        await self._transfer_relayed(session)

    async def _transfer_direct(self, session: UploadSession) -> bool:
        file = session.file
        if urlparse(session.target_url).scheme not in _DIRECT_SCHEMES:
            logger.warning("Direct upload skipped — unsupported URL %s", session.target_url)
            return False

        try:
            total = file.size_bytes
            response = await self._http.put(
                session.target_url,
                content=self._stream(session, total),
                headers={"Content-Type": file.mime_type, "Content-Length": str(total)},
            )
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.warning("Direct upload error — file=%s error=%s", file.name, exc)
            return False

        if not response.is_success:
            logger.warning(
                "Direct upload rejected — file=%s status=%d",
                file.name,
                response.status_code,
            )
            return False

        session.report(100)
        logger.info(
            "Upload complete — file=%s strategy=%s bytes=%d",
            file.name,
            session.strategy,
            total,
        )
        return True

    async def _stream(self, session: UploadSession, total: int) -> AsyncIterator[bytes]:
        sent = 0
        async for chunk in session.file.iter_chunks(self._config.chunk_size):
            yield chunk
            sent += len(chunk)
            if total:
                # 100 is reserved for the storage acknowledgement.
                session.report(min(99, sent * 100 // total))

    async def _transfer_relayed(self, session: UploadSession) -> None:
        file = session.file
        session.report(0, force=True)
        try:
            body = await file.load()
        except OSError as exc:
            logger.error("Relayed upload failed — file=%s error=%s", file.name, exc)
            raise UploadError(f"Cannot read {file.name}: {exc}") from exc
        files = {"file": (file.name, body, file.mime_type)}
        try:
            await self._client.call(
                "POST",
                self.relay_url,
                files=files,
                data={"uploadUrl": session.target_url},
            )
        except BackendError as exc:
            logger.error("Relayed upload failed — file=%s status=%d", file.name, exc.status)
            raise UploadError(exc.message, status=exc.status, details=exc.details) from exc
        except ApiError as exc:
            logger.error("Relayed upload failed — file=%s error=%s", file.name, exc)
            raise UploadError(str(exc)) from exc

        session.report(100)
        logger.info("Upload complete — file=%s strategy=%s", file.name, session.strategy)

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
