"""Explicit per-invocation state passed through the job flow.

RetryState lives for one logical invocation, PollState for one job's polling
lifetime. Neither is shared between independent operations.
"""

from enum import StrEnum

from pydantic import BaseModel, Field


class RetryState(BaseModel):
    attempt: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=3, ge=0)

    @property
    def is_fresh(self) -> bool:
        return self.attempt == 0

    def reset(self) -> None:
        self.attempt = 0


class RetryAction(StrEnum):
    stop = "stop"
    retry_after = "retry_after"


class RetryDecision(BaseModel):
    model_config = {"frozen": True}

    action: RetryAction
    delay_ms: int = 0

    @classmethod
    def stop(cls) -> "RetryDecision":
        return cls(action=RetryAction.stop)

    @classmethod
    def retry_after(cls, delay_ms: int) -> "RetryDecision":
        return cls(action=RetryAction.retry_after, delay_ms=delay_ms)

    @property
    def should_retry(self) -> bool:
        return self.action == RetryAction.retry_after


class PollPhase(StrEnum):
    polling = "polling"
    completed = "completed"
    failed = "failed"
    timed_out = "timed_out"


class PollState(BaseModel):
    """Polling budget of a single job.

    `started_at` is a monotonic clock reading in seconds.
    """

    attempts: int = 0
    max_attempts: int = 60
    started_at: float
    timeout_ms: int = 120_000
    phase: PollPhase = PollPhase.polling

    def elapsed_ms(self, now: float) -> float:
        return (now - self.started_at) * 1000

    def is_over_time(self, now: float) -> bool:
        return self.elapsed_ms(now) > self.timeout_ms

    def is_over_attempts(self) -> bool:
        return self.attempts > self.max_attempts
