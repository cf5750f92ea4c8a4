from __future__ import annotations

from docjob.core.models.state import RetryDecision, RetryState


class RetryPolicy:
    """Decides whether a failed submission is re-submitted and after what delay.

    Only errors flagged `retryable` (TransientError) are re-submitted.
    The n-th retry waits min(base * 2**(n-1), max) milliseconds: 1000, 2000,
    4000 with the defaults.
    Every Stop resets the attempt counter so the next fresh invocation starts
    at zero.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 5000,
    ) -> None:
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=config.submit_max_retries,
            base_delay_ms=int(config.retry_base_wait * 1000),
            max_delay_ms=int(config.retry_max_wait * 1000),
        )

    def new_state(self) -> RetryState:
        return RetryState(max_attempts=self.max_attempts)

    def delay_ms(self, attempt: int) -> int:
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)

    def decide(self, error: BaseException, state: RetryState) -> RetryDecision:
        if not getattr(error, "retryable", False):
            state.reset()
            return RetryDecision.stop()
        if state.attempt >= state.max_attempts:
            state.reset()
            return RetryDecision.stop()
        state.attempt += 1
        return RetryDecision.retry_after(self.delay_ms(state.attempt))
