"""TokenManager: supplies a live, validated bearer token for every call.

The gateway in front of the processing function rejects expired or revoked
tokens before the function runs, so a token is refreshed when it is close to
expiry and then validated against the identity service right before use.
Nothing outside this class holds on to a session.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from docjob.core.exceptions import AuthError
from docjob.core.interfaces.identity import IdentityPort
from docjob.core.models.session import Session
from docjob.core.settings import logger

DEFAULT_FRESHNESS_MARGIN = 15 * 60  # seconds


class TokenManager:
    def __init__(
        self,
        identity: IdentityPort,
        freshness_margin: float = DEFAULT_FRESHNESS_MARGIN,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._identity = identity
        self._margin = freshness_margin
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_valid_token(self) -> Session:
        """Return a session whose access token is fresh and accepted by the server.

        Raises:
            AuthError: not signed in, refresh failed, or validation failed
                after one refresh-and-revalidate cycle.
        """
        session = await self._current_session()

        remaining = session.seconds_remaining(self._clock())
        if remaining < self._margin:
            logger.debug(
                f"[auth:refresh] session expiring soon remaining={int(remaining)}s margin={int(self._margin)}s"
            )
            session = await self._refresh()

        if await self._validate():
            return session

        logger.warning("[auth:validate] token rejected by identity service; refreshing once")
        session = await self._refresh()
        if not await self._validate():
            logger.error("[auth:validate] token still invalid after refresh")
            raise AuthError("invalid session")
        logger.debug("[auth:validate] token validated after refresh")
        return session

    async def _current_session(self) -> Session:
        try:
            session = await self._identity.get_session()
        except Exception as exc:
            logger.error(f"[auth:session] session lookup failed err={exc}")
            raise AuthError("not signed in", diagnostic=str(exc)) from exc
        if session is None or not session.access_token:
            raise AuthError("not signed in")
        return session

    async def _refresh(self) -> Session:
        try:
            session = await self._identity.refresh_session()
        except Exception as exc:
            logger.error(f"[auth:refresh] refresh failed err={exc}")
            raise AuthError("refresh failed", diagnostic=str(exc)) from exc
        if session is None or not session.access_token:
            raise AuthError("refresh failed", diagnostic="identity service returned no access token")
        logger.debug(f"[auth:refresh] session refreshed expires_at={session.expires_at}")
        return session

    async def _validate(self) -> bool:
        try:
            principal = await self._identity.get_current_user()
        except Exception as exc:
            logger.debug(f"[auth:validate] validation call failed err={exc}")
            return False
        return principal is not None
