from __future__ import annotations

from pydantic import ValidationError

from docjob.core.exceptions import TransientError
from docjob.core.managers.processing_endpoint import ProcessingEndpoint
from docjob.core.models.job import SubmissionRequest, SubmitResponse
from docjob.core.settings import logger


class JobSubmitter:
    """Sends one processing request and returns the server-assigned job id.

    Every call re-runs the full path (fresh token, fresh request), so a retry
    is never a resend of a previous network call.
    """

    def __init__(self, endpoint: ProcessingEndpoint) -> None:
        self._endpoint = endpoint

    async def submit(self, request: SubmissionRequest) -> str:
        logger.info(
            f"[job:submit] submitting document record_id={request.record_id} url={request.document_url}"
        )
        body = await self._endpoint.invoke(request.to_payload())

        try:
            response = SubmitResponse.model_validate(body)
        except ValidationError as exc:
            raise TransientError(
                "Processing function returned a malformed payload",
                diagnostic=str(exc),
            ) from exc

        if response.success and response.job_id:
            logger.info(f"[job:submit] job created job_id={response.job_id}")
            return response.job_id

        logger.warning(
            f"[job:submit] response without job id success={response.success} error={response.error}"
        )
        raise TransientError(
            response.error or "Failed to start processing job",
            diagnostic=f"success={response.success} job_id={response.job_id}",
        )
