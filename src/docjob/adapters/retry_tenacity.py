import asyncio
from typing import Any, Awaitable, Callable, Optional

from tenacity import AsyncRetrying, RetryCallState

from docjob.core.managers.retry_policy import RetryPolicy
from docjob.core.models.state import RetryDecision, RetryState
from docjob.core.settings import logger


class TenacityRetryAdapter:
    """Tenacity-based retry adapter implementing RetryPort.

    Tenacity runs the attempt loop. The RetryPolicy is consulted once per
    failed attempt from the `retry` hook, which tenacity evaluates before
    `wait` and `stop`; both of those only read the decision just made. The
    RetryState of the invocation stays the single source of truth for the
    attempt counter. A Stop re-raises the failed attempt's own exception.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def execute(self, func: Callable[..., Awaitable[Any]], state: RetryState, *args, **kwargs) -> Any:
        decision: dict[str, RetryDecision] = {}

        def retry(retry_state: RetryCallState) -> bool:
            if not retry_state.outcome.failed:
                return False
            decision["last"] = self.policy.decide(retry_state.outcome.exception(), state)
            return decision["last"].should_retry

        def stop(retry_state: RetryCallState) -> bool:
            return not decision["last"].should_retry

        def wait(retry_state: RetryCallState) -> float:
            return decision["last"].delay_ms / 1000

        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception()
            logger.warning(
                f"[job:retry] attempt {state.attempt}/{state.max_attempts} in {decision['last'].delay_ms}ms "
                f"after {type(exc).__name__}: {exc}"
            )

        retrying = AsyncRetrying(
            stop=stop,
            wait=wait,
            retry=retry,
            before_sleep=before_sleep,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await func(*args, **kwargs)
