from enum import StrEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(StrEnum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = {JobStatus.completed, JobStatus.failed}


class Chapter(BaseModel):
    number: int
    title: str


class JobResult(BaseModel):
    """Extraction result of a completed job.

    An empty result (no chapters, no page count) is a valid outcome meaning
    the processor found nothing; it is not an error.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page_count: Optional[int] = Field(default=None, alias="pageCount")
    chapters: List[Chapter] = Field(default_factory=list)

    @field_validator("page_count", mode="before")
    @classmethod
    def _positive_page_count(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        count = int(value)
        return count if count > 0 else None

    @field_validator("chapters", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not self.chapters and self.page_count is None


class Job(BaseModel):
    """Server-tracked unit of asynchronous document-processing work.

    Built from the `job` object of a status response; `id` is supplied by the
    caller since the server echoes only the job body.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    status: JobStatus
    progress: int = Field(default=0, ge=0, le=100)
    result: Optional[JobResult] = None
    error_message: Optional[str] = Field(default=None, alias="error")

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(round(float(value)))))

    def is_in_terminal_state(self) -> bool:
        return self.status in TERMINAL_STATUSES


class SubmissionRequest(BaseModel):
    """Immutable request to process one stored document."""

    model_config = ConfigDict(frozen=True)

    document_url: str
    record_id: Optional[str] = None

    @property
    def operation_key(self) -> str:
        """Logical-operation identity used by the ConcurrencyGuard."""
        return self.record_id or self.document_url

    def to_payload(self) -> dict:
        return {"pdfUrl": self.document_url, "bookId": self.record_id}


class SubmitResponse(BaseModel):
    """Body returned by the processing function for a submission."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    job_id: Optional[str] = Field(default=None, alias="jobId")
    error: Optional[str] = None
