from abc import ABC, abstractmethod
from typing import Optional

from docjob.core.models.session import Principal, Session


class IdentityPort(ABC):
    """Remote identity service holding the signed-in user's session.

    Implementations raise any exception on failure; TokenManager treats every
    failure of these calls as an authentication problem.
    """

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """Return the current session or None when nobody is signed in."""
        pass

    @abstractmethod
    async def refresh_session(self) -> Session:
        """Exchange the refresh token for a new session and store it."""
        pass

    @abstractmethod
    async def get_current_user(self) -> Principal:
        """Ask the identity service who the current access token belongs to."""
        pass
