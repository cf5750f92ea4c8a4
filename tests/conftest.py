"""Shared fixtures for the job client tests.

Time is simulated: `FakeClock` doubles as the monotonic clock and the async
sleep function injected into the poller and the retry adapter, so no test
waits for real.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from docjob.core.models.session import Principal, Session


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_session(token: str = "token-1", expires_in: timedelta = timedelta(hours=1)) -> Session:
    return Session(
        access_token=token,
        refresh_token=f"refresh-{token}",
        expires_at=datetime.now(timezone.utc) + expires_in,
    )


def make_identity(session: Session | None = None, refreshed: Session | None = None) -> AsyncMock:
    identity = AsyncMock()
    identity.get_session.return_value = session
    identity.refresh_session.return_value = refreshed or make_session("token-2")
    identity.get_current_user.return_value = Principal(id="user-1", email="admin@example.org")
    return identity


def http_response(body, status: int = 200) -> dict:
    return {"status": status, "headers": {}, "body": body}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def identity():
    return make_identity(make_session())
