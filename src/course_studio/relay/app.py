"""Relay service entry point — FastAPI app serving the same-origin upload proxy."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx
import uvicorn
from fastapi import FastAPI, Request

from course_studio.config import Settings, load_settings
from course_studio.logging import configure_logging
from course_studio.relay.routes import router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from starlette.responses import Response

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    http: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the relay application.

    ``http`` replaces the outbound client used for storage PUTs; the app closes
    only a client it created itself.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        client = http or httpx.AsyncClient(timeout=settings.upload.timeout_seconds)
        app.state.http = client
        logger.info(
            "Upload relay started — env=%s allowed_hosts=%s",
            settings.app.env,
            ",".join(app.state.allowed_hosts),
        )
        try:
            yield
        finally:
            if http is None:
                await client.aclose()
            logger.info("Upload relay stopped")

    app = FastAPI(title="course-studio upload relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.allowed_hosts = settings.relay.allowed_hosts
    app.include_router(router)

    slow_request_ms = settings.app.slow_request_ms

    @app.middleware("http")
    async def log_slow_requests(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started_at = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - started_at) * 1000
        if duration_ms >= slow_request_ms:
            logger.warning(
                "Slow request — method=%s path=%s status=%d duration_ms=%.0f",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        return response

    return app


def main() -> None:
    """Entry point for the relay process."""
    settings = load_settings()
    log_file = "relay.log" if settings.app.is_development else None
    configure_logging(settings.app.log_level, log_file=log_file)
    uvicorn.run(create_app(settings), host=settings.relay.host, port=settings.relay.port)


if __name__ == "__main__":
    main()
