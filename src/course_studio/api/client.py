"""Async backend client with transparent session renewal."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from course_studio.api.renewal import RenewalCoordinator
from course_studio.api.session import Session
from course_studio.errors import ApiError, BackendError, Unreachable

if TYPE_CHECKING:
    from collections.abc import Callable

    from course_studio.config import ApiConfig

logger = logging.getLogger(__name__)

_AUTH_PREFIX = "auth/"
_DEFAULT_ERROR = "An error occurred"


def _is_auth_endpoint(endpoint: str) -> bool:
    return endpoint.lstrip("/").startswith(_AUTH_PREFIX)


def _backend_error(response: httpx.Response) -> BackendError:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    message = response.reason_phrase or _DEFAULT_ERROR
    details = None
    if isinstance(payload, dict):
        if payload.get("error"):
            message = str(payload["error"])
        if payload.get("details"):
            details = str(payload["details"])
    return BackendError(response.status_code, message, details=details)


class RequestClient:
    """Issues backend calls for one authenticated session.

    Construct one instance per session and pass it to collaborators. A call
    rejected with 401 waits for a single shared renewal and is retried once;
    a second rejection is surfaced as-is.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        session: Session | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_session_expired: Callable[[], None] | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )
        self.session = session or Session()
        self._on_session_expired = on_session_expired
        self._renewal = RenewalCoordinator(
            self.session,
            self._refresh,
            on_expired=self._handle_expired,
        )

    @property
    def renewal(self) -> RenewalCoordinator:
        return self._renewal

    @property
    def organization_id(self) -> str:
        return self._config.organization_id

    def same_origin_url(self, path: str) -> str:
        """Resolve an absolute path against the backend's origin."""
        return str(self._client.base_url.join(path))

    async def call(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        organization_id: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body ({} when empty)."""
        request_kwargs: dict[str, Any] = {
            "json": json,
            "params": params,
            "files": files,
            "data": data,
        }
        extra_headers = dict(headers or {})
        org_id = organization_id or self._config.organization_id
        if org_id:
            extra_headers.setdefault("X-Org-ID", org_id)

        response = await self._send(method, endpoint, extra_headers, request_kwargs)
        if response.status_code == httpx.codes.UNAUTHORIZED and not _is_auth_endpoint(endpoint):
            logger.info("Session expired — method=%s endpoint=%s", method, endpoint)
            await self._renewal.renew()
            response = await self._send(method, endpoint, extra_headers, request_kwargs)
        return self._decode(response)

    async def _send(
        self,
        method: str,
        endpoint: str,
        headers: dict[str, str],
        request_kwargs: dict[str, Any],
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                endpoint,
                headers={**self.session.auth_headers(), **headers},
                **{key: value for key, value in request_kwargs.items() if value is not None},
            )
        except httpx.TransportError as exc:
            logger.warning(
                "Backend unreachable — method=%s endpoint=%s error=%s",
                method,
                endpoint,
                exc,
            )
            raise Unreachable from exc
        logger.debug(
            "Backend call — method=%s endpoint=%s status=%d",
            method,
            endpoint,
            response.status_code,
        )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.is_success:
            raise _backend_error(response)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return {}
        return response.json()

    async def _refresh(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.session.refresh_token:
            body["refresh_token"] = self.session.refresh_token
        response = await self._send(
            "POST",
            "auth/refresh",
            {},
            {"json": body, "params": {"use_cookies": "true"}},
        )
        payload = self._decode(response)
        return payload if isinstance(payload, dict) else {}

    def _handle_expired(self) -> None:
        self._client.cookies.clear()
        if self._on_session_expired is not None:
            self._on_session_expired()

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Sign in and store the returned credentials."""
        body = await self.call(
            "POST",
            "auth/login",
            params={"use_cookies": "true"},
            json={"email": email, "password": password},
        )
        self._renewal.establish(body)
        logger.info("Signed in — email=%s", email)
        return body

    async def sign_out(self) -> None:
        """Sign out; backend errors are ignored and the session is always torn down."""
        try:
            await self.call("POST", "auth/logout")
        except ApiError:
            logger.debug("Sign-out call failed; tearing the session down anyway", exc_info=True)
        self._renewal.tear_down()
        self._client.cookies.clear()

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RequestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
