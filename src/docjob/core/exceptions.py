from typing import Optional


# Domain-specific job client exceptions

class JobClientError(Exception):
    """Base exception for document-processing job failures.

    Attributes:
        message: Human-readable error description
        diagnostic: Technical diagnostic information for debugging
        job_id: Optional job identifier
    """
    retryable = False
    user_message = "Document processing failed."

    def __init__(
        self,
        message: str,
        diagnostic: Optional[str] = None,
        job_id: Optional[str] = None
    ):
        self.message = message
        self.diagnostic = diagnostic
        self.job_id = job_id
        super().__init__(message)


class AuthError(JobClientError):
    """No valid/refreshable session, or the server rejected the token.

    Never retried automatically; the caller should ask the user to sign in
    again.
    """
    user_message = "Your session is invalid or has expired. Please sign in again."

    def __init__(
        self,
        message: str,
        requires_reauth: bool = True,
        diagnostic: Optional[str] = None,
        job_id: Optional[str] = None
    ):
        self.requires_reauth = requires_reauth
        super().__init__(message=message, diagnostic=diagnostic, job_id=job_id)


class ConfigurationError(JobClientError):
    """The processing function reports it is missing or misconfigured.

    Attributes:
        fix_instructions: Remediation guidance returned by the server
    """
    user_message = "Document processing is not deployed or not configured."

    def __init__(
        self,
        message: str,
        fix_instructions: Optional[str] = None,
        diagnostic: Optional[str] = None,
    ):
        self.fix_instructions = fix_instructions
        super().__init__(message=message, diagnostic=diagnostic)


class TransientError(JobClientError):
    """Network failure, 5xx or ambiguous response; retried by RetryPolicy.

    Attributes:
        status: HTTP status code (if the failure had one)
    """
    retryable = True
    user_message = "Unable to start document processing. Please try again later."

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        diagnostic: Optional[str] = None,
        job_id: Optional[str] = None
    ):
        self.status = status
        super().__init__(message=message, diagnostic=diagnostic, job_id=job_id)


class JobTimeoutError(JobClientError):
    """Raised when polling exceeds its time or attempt budget.

    Not a hard failure: the job may still complete server-side.

    Attributes:
        elapsed_seconds: Time elapsed before giving up
        attempts: Number of status queries performed
    """
    user_message = "Processing is taking longer than expected. Check back later."

    def __init__(
        self,
        job_id: str,
        elapsed_seconds: float,
        attempts: int,
        diagnostic: Optional[str] = None
    ):
        self.elapsed_seconds = elapsed_seconds
        self.attempts = attempts
        message = (
            f"Job {job_id} still not finished after {elapsed_seconds:.1f}s "
            f"and {attempts} status checks"
        )
        super().__init__(message=message, diagnostic=diagnostic, job_id=job_id)


class JobFailedError(JobClientError):
    """The job reached the terminal `failed` state server-side."""
    user_message = "Processing failed. Please enter the details manually."

    def __init__(self, job_id: str, message: Optional[str] = None):
        super().__init__(message=message or "Unknown error", job_id=job_id)


class OperationInProgressError(JobClientError):
    """A fresh invocation was rejected because the same operation is running.

    Attributes:
        operation_key: Logical-operation identity that is already in flight
    """
    user_message = "This document is already being processed."

    def __init__(self, operation_key: str):
        self.operation_key = operation_key
        super().__init__(message=f"Operation '{operation_key}' is already in progress")
