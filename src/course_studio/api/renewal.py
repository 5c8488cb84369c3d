"""Single-flight session renewal."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from course_studio.api.session import Session, SessionState
from course_studio.errors import ApiError, SessionExpired

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RenewalCoordinator:
    """Owns every mutation of the session credential.

    Concurrent callers that discover an expired session share one pending
    renewal task. The reference is cleared when that task finishes, so a later
    expiry starts a fresh renewal.
    """

    def __init__(
        self,
        session: Session,
        refresh: Callable[[], Awaitable[dict[str, Any]]],
        *,
        on_expired: Callable[[], None] | None = None,
    ) -> None:
        self._session = session
        self._refresh = refresh
        self._on_expired = on_expired
        self._pending: asyncio.Task[None] | None = None
        self.renewals = 0

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    async def renew(self) -> None:
        """Renew the session, joining a renewal already in flight if there is one.

        Raises ``SessionExpired`` when the renewal fails.
        """
        pending = self._pending
        if pending is None:
            pending = asyncio.ensure_future(self._renew_once())
            self._pending = pending
        else:
            logger.debug("Joining in-flight session renewal")
        # Shielded so a cancelled waiter does not cancel the renewal for the others.
        await asyncio.shield(pending)

    async def _renew_once(self) -> None:
        self.renewals += 1
        self._session.state = SessionState.RENEWING
        logger.info("Session renewal started")
        try:
            body = await self._refresh()
        except ApiError as exc:
            logger.warning("Session renewal failed — %s", exc)
            self.tear_down()
            if self._on_expired is not None:
                self._on_expired()
            raise SessionExpired from exc
        finally:
            self._pending = None
        self._session.apply_tokens(body)
        logger.info("Session renewed")

    def establish(self, body: dict[str, Any]) -> None:
        """Store credentials returned by a sign-in."""
        self._session.apply_tokens(body)

    def tear_down(self) -> None:
        self._session.clear()
