"""Client-held session credential."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class SessionState(StrEnum):
    VALID = "valid"
    EXPIRED = "expired"
    RENEWING = "renewing"


@dataclass
class Session:
    """Credential attached to every backend call.

    Cookies set by the backend live in the HTTP client's jar; bearer tokens are
    kept here when the backend returns them in a response body.
    """

    state: SessionState = SessionState.VALID
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: str | None = None

    def auth_headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    def apply_tokens(self, body: dict[str, Any]) -> None:
        self.access_token = body.get("access_token") or self.access_token
        self.refresh_token = body.get("refresh_token") or self.refresh_token
        self.expires_at = body.get("expires_at") or self.expires_at
        self.state = SessionState.VALID

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.expires_at = None
        self.state = SessionState.EXPIRED
