from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


class Session(BaseModel):
    """Bearer-token session owned by TokenManager.

    `expires_at` is UTC; a session without an expiry is treated as expired
    so that it is refreshed before use.
    """

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def seconds_remaining(self, now: Optional[datetime] = None) -> float:
        if self.expires_at is None:
            return 0.0
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return (expires_at - now).total_seconds()


class Principal(BaseModel):
    """Identity returned by the identity service when a token is live."""

    id: str
    email: Optional[str] = None
    username: Optional[str] = None
