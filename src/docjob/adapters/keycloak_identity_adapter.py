"""Keycloak-backed identity service.

Holds the signed-in user's session and talks to Keycloak's OpenID Connect
endpoints through python-keycloak. The library is synchronous, so every call
runs in a worker thread to keep the event loop free.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

from docjob.core.interfaces.identity import IdentityPort
from docjob.core.models.session import Principal, Session
from docjob.core.settings import logger


def session_from_token_response(data: Dict[str, Any], now: Optional[datetime] = None) -> Session:
    """Build a Session from an OIDC token endpoint response."""
    now = now or datetime.now(timezone.utc)
    expires_in = data.get("expires_in")
    return Session(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_at=now + timedelta(seconds=int(expires_in)) if expires_in is not None else None,
    )


class KeycloakIdentityAdapter(IdentityPort):
    def __init__(self, openid: KeycloakOpenID, session: Optional[Session] = None):
        self._openid = openid
        self._session = session
        self._lock = asyncio.Lock()

    @classmethod
    def from_app_settings(cls, settings) -> "KeycloakIdentityAdapter":
        secret = settings.DOCJOB_KEYCLOAK_CLIENT_SECRET
        openid = KeycloakOpenID(
            server_url=str(settings.DOCJOB_KEYCLOAK_URL),
            realm_name=settings.DOCJOB_KEYCLOAK_REALM,
            client_id=settings.DOCJOB_KEYCLOAK_CLIENT_ID,
            client_secret_key=secret.get_secret_value() if secret else None,
            verify=True,
        )
        return cls(openid)

    async def sign_in(self, username: str, password: str) -> Session:
        data = await asyncio.to_thread(self._openid.token, username, password)
        self._session = session_from_token_response(data)
        logger.info(f"[identity:sign-in] signed in user={username} expires_at={self._session.expires_at}")
        return self._session

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        if session and session.refresh_token:
            try:
                await asyncio.to_thread(self._openid.logout, session.refresh_token)
            except KeycloakError as exc:
                logger.warning(f"[identity:sign-out] logout failed err={exc}")

    async def get_session(self) -> Optional[Session]:
        return self._session

    async def refresh_session(self) -> Session:
        # Serialise refreshes: concurrent flows must not burn the same refresh token twice
        async with self._lock:
            if self._session is None or not self._session.refresh_token:
                raise KeycloakError(error_message="no refresh token available")
            data = await asyncio.to_thread(self._openid.refresh_token, self._session.refresh_token)
            self._session = session_from_token_response(data)
            return self._session

    async def get_current_user(self) -> Principal:
        if self._session is None:
            raise KeycloakError(error_message="not signed in")
        info = await asyncio.to_thread(self._openid.userinfo, self._session.access_token)
        return Principal(
            id=info["sub"],
            email=info.get("email"),
            username=info.get("preferred_username"),
        )
