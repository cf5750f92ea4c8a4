from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Set

from docjob.core.exceptions import OperationInProgressError
from docjob.core.models.state import RetryState
from docjob.core.settings import logger


class ConcurrencyGuard:
    """Keeps at most one fresh invocation in flight per logical operation.

    A fresh invocation (retry attempt 0) is rejected while its operation key
    is held. A retry (attempt > 0) continues the same logical operation and is
    always admitted. Keys are independent of each other.
    """

    def __init__(self) -> None:
        self._in_progress: Set[str] = set()

    def is_in_progress(self, key: str) -> bool:
        return key in self._in_progress

    def admit(self, key: str, state: RetryState) -> bool:
        """Admit an invocation; return True if it took ownership of the flag.

        Raises:
            OperationInProgressError: fresh invocation while the key is held.
        """
        if not state.is_fresh:
            logger.debug(f"[guard:admit] retry attempt={state.attempt} admitted key={key}")
            return False
        if key in self._in_progress:
            logger.info(f"[guard:admit] already processing, rejecting duplicate call key={key}")
            raise OperationInProgressError(key)
        self._in_progress.add(key)
        return True

    def release(self, key: str) -> None:
        self._in_progress.discard(key)

    @asynccontextmanager
    async def hold(self, key: str, state: RetryState) -> AsyncIterator[None]:
        """Admit on entry; clear the flag on every exit path if we own it."""
        owner = self.admit(key, state)
        try:
            yield
        finally:
            if owner:
                self.release(key)
                logger.debug(f"[guard:release] key={key}")
