"""Relay routes — same-origin PUT to allow-listed storage hosts."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Annotated
from urllib.parse import urlsplit

import httpx
from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from course_studio.models.content import DEFAULT_MIME_TYPE
from course_studio.relay.allowlist import DestinationRejected, check_destination

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

router = APIRouter(prefix="/internal", tags=["relay"])
logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_MAX_DETAILS_CHARS = 2048


async def _read_chunks(upload: UploadFile) -> AsyncIterator[bytes]:
    while chunk := await upload.read(_CHUNK_SIZE):
        yield chunk


def _error(message: str, status_code: int, *, details: str | None = None) -> JSONResponse:
    body: dict[str, object] = {"error": message, "status": status_code}
    if details:
        body["details"] = details[:_MAX_DETAILS_CHARS]
    return JSONResponse(body, status_code=status_code)


@router.post("/upload-proxy")
async def upload_proxy(
    request: Request,
    file: Annotated[UploadFile | None, File()] = None,
    upload_url: Annotated[str | None, Form(alias="uploadUrl")] = None,
    legacy_upload_url: Annotated[str | None, Form(alias="upload_url")] = None,
) -> JSONResponse:
    """Forward an uploaded file to a signed storage URL on an allow-listed host."""
    if file is None:
        return _error("Missing file", status.HTTP_400_BAD_REQUEST)

    try:
        target = check_destination(
            upload_url if upload_url is not None else legacy_upload_url,
            request.app.state.allowed_hosts,
        )
    except DestinationRejected as exc:
        logger.warning("Relay upload rejected — reason=%s", exc)
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)

    headers = {"Content-Type": file.content_type or DEFAULT_MIME_TYPE}
    if file.size is not None:
        headers["Content-Length"] = str(file.size)

    started_at = time.monotonic()
    http: httpx.AsyncClient = request.app.state.http
    try:
        upstream = await http.put(target, content=_read_chunks(file), headers=headers)
    except httpx.HTTPError as exc:
        logger.error("Relay upload failed — host=%s error=%s", urlsplit(target).hostname, exc)
        return _error(
            "Storage is unreachable",
            status.HTTP_502_BAD_GATEWAY,
            details=str(exc) or None,
        )

    logger.info(
        "Relay upload forwarded — host=%s status=%d bytes=%s duration_ms=%.0f",
        urlsplit(target).hostname,
        upstream.status_code,
        file.size,
        (time.monotonic() - started_at) * 1000,
    )
    if not upstream.is_success:
        return _error(
            "Error while uploading to storage",
            upstream.status_code,
            details=upstream.text or None,
        )
    return JSONResponse({"success": True})


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
