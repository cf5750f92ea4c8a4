"""JobClient: orchestrates the document-processing flow.

Responsibilities:
1. Admit the call through the ConcurrencyGuard (one fresh invocation per
   logical operation).
2. Submit the document, re-submitting transient failures per RetryPolicy.
3. Poll the created job until it is terminal or out of budget.
4. Merge the extracted data into the caller's record.
5. Reset the RetryState and release the guard on every exit path.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Set

from docjob.core.exceptions import JobClientError
from docjob.core.interfaces.retry import RetryPort
from docjob.core.logging_config import operation_id_var
from docjob.core.managers.concurrency_guard import ConcurrencyGuard
from docjob.core.managers.job_poller import JobPoller
from docjob.core.managers.job_submitter import JobSubmitter
from docjob.core.managers.result_merger import ResultMerger
from docjob.core.managers.retry_policy import RetryPolicy
from docjob.core.models.job import SubmissionRequest
from docjob.core.models.record import BookRecord, MergeOutcome
from docjob.core.settings import logger


class JobClient:
    def __init__(
        self,
        submitter: JobSubmitter,
        poller: JobPoller,
        retry_port: RetryPort,
        retry_policy: Optional[RetryPolicy] = None,
        guard: Optional[ConcurrencyGuard] = None,
        merger: Optional[ResultMerger] = None,
    ) -> None:
        self._submitter = submitter
        self._poller = poller
        self._retry = retry_port
        self._policy = retry_policy or getattr(retry_port, "policy", None) or RetryPolicy()
        self._guard = guard or ConcurrencyGuard()
        self._merger = merger or ResultMerger()
        self._tasks: Set[asyncio.Task] = set()
        self._shutdown = False

    def is_processing(self, operation_key: str) -> bool:
        return self._guard.is_in_progress(operation_key)

    async def process_document(
        self, request: SubmissionRequest, record: BookRecord
    ) -> MergeOutcome:
        """Run submit -> poll -> merge for one document.

        Raises:
            OperationInProgressError: the same operation is already running.
            AuthError, ConfigurationError: fatal, never retried.
            TransientError: submission still failing after all retries.
            JobTimeoutError: job not terminal within the polling budget.
            JobFailedError: job failed server-side.
        """
        key = request.operation_key
        state = self._policy.new_state()
        token = operation_id_var.set(key)
        try:
            async with self._guard.hold(key, state):
                try:
                    # retries run inside the hold taken by the fresh invocation
                    job_id = await self._retry.execute(self._submitter.submit, state, request)
                finally:
                    state.reset()

                result = await self._poller.poll(job_id)
                outcome = self._merger.merge(result, record)
                logger.info(f"[job:merge] job_id={job_id} kind={outcome.kind}")
                return outcome
        except JobClientError as exc:
            logger.warning(
                f"[job:flow] {type(exc).__name__} key={key} message={exc.message} diagnostic={exc.diagnostic}"
            )
            raise
        finally:
            operation_id_var.reset(token)

    def start(self, request: SubmissionRequest, record: BookRecord) -> asyncio.Task:
        """Schedule `process_document` in the background and return its task.

        The caller may stop awaiting the task; polling continues until its own
        terminal state or timeout unless `shutdown` cancels it.
        """
        if self._shutdown:
            raise RuntimeError("JobClient is shut down")
        logger.debug(f"[job:start] scheduling background flow key={request.operation_key}")
        task = asyncio.create_task(self.process_document(request, record))
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._tasks.discard(t))
        return task

    async def shutdown(self) -> None:
        self._shutdown = True
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
