"""JobPoller: follows a submitted job until it reaches a terminal state.

State machine: Polling -> Completed | Failed | TimedOut.

Each iteration checks the wall-clock budget, sleeps the fixed interval,
checks the attempt budget and then queries the job status with a freshly
obtained token. A single failed status check (transient error or a response
without a job) is logged and does not abort polling; authentication and
configuration errors do.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from docjob.core.exceptions import JobFailedError, JobTimeoutError, TransientError
from docjob.core.managers.processing_endpoint import ProcessingEndpoint
from docjob.core.models.job import Job, JobResult, JobStatus
from docjob.core.models.state import PollPhase, PollState
from docjob.core.settings import logger


class JobPoller:
    def __init__(
        self,
        endpoint: ProcessingEndpoint,
        poll_interval: float = 2.0,
        max_attempts: int = 60,
        timeout: float = 120.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._endpoint = endpoint
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(cls, endpoint: ProcessingEndpoint, config, **kwargs) -> "JobPoller":
        return cls(
            endpoint,
            poll_interval=config.poll_interval,
            max_attempts=config.poll_max_attempts,
            timeout=config.poll_timeout,
            **kwargs,
        )

    def new_state(self) -> PollState:
        return PollState(
            max_attempts=self.max_attempts,
            started_at=self._clock(),
            timeout_ms=int(self.timeout * 1000),
        )

    async def poll(self, job_id: str, state: Optional[PollState] = None) -> JobResult:
        """Poll `job_id` until completed, failed, or out of budget.

        Raises:
            JobTimeoutError: time or attempt budget exhausted.
            JobFailedError: the job reached `failed` server-side.
        """
        state = state or self.new_state()
        logger.debug(
            f"[job:poll] start job_id={job_id} interval={self.poll_interval}s "
            f"max_attempts={state.max_attempts} timeout_ms={state.timeout_ms}"
        )

        while True:
            if state.is_over_time(self._clock()):
                self._time_out(job_id, state, "timeout exceeded")

            await self._sleep(self.poll_interval)
            state.attempts += 1
            if state.is_over_attempts():
                self._time_out(job_id, state, "max attempts exceeded")

            job = await self._fetch_status(job_id, state)
            if job is None:
                continue

            if not job.is_in_terminal_state():
                logger.debug(
                    f"[job:poll] job_id={job_id} status={job.status} progress={job.progress}% attempt={state.attempts}"
                )
                continue

            if job.status == JobStatus.completed:
                state.phase = PollPhase.completed
                logger.info(f"[job:poll] completed job_id={job_id} attempts={state.attempts}")
                return job.result or JobResult()

            state.phase = PollPhase.failed
            logger.warning(
                f"[job:poll] failed job_id={job_id} attempts={state.attempts} error={job.error_message}"
            )
            raise JobFailedError(job_id, job.error_message)

    async def _fetch_status(self, job_id: str, state: PollState) -> Optional[Job]:
        try:
            body = await self._endpoint.invoke({"jobId": job_id})
        except TransientError as exc:
            logger.warning(
                f"[job:poll] status check error job_id={job_id} attempt={state.attempts} err={exc}"
            )
            return None

        payload = body.get("job")
        if not isinstance(payload, dict):
            logger.debug(f"[job:poll] no job in status response job_id={job_id} attempt={state.attempts}")
            return None
        try:
            return Job.model_validate({**payload, "id": job_id})
        except ValidationError as exc:
            logger.warning(
                f"[job:poll] malformed job status job_id={job_id} attempt={state.attempts} err={exc}"
            )
            return None

    def _time_out(self, job_id: str, state: PollState, reason: str) -> None:
        state.phase = PollPhase.timed_out
        elapsed = state.elapsed_ms(self._clock()) / 1000
        logger.warning(
            f"[job:poll] {reason} job_id={job_id} elapsed={elapsed:.1f}s attempts={state.attempts}"
        )
        raise JobTimeoutError(job_id, elapsed_seconds=elapsed, attempts=state.attempts)
