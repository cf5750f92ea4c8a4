"""Configuration models for core domain components.

This module provides a Pydantic-based configuration class that consolidates
the timing and budget settings of the job client, enabling dependency
injection and testability.
"""

from pydantic import BaseModel, Field


class JobClientConfig(BaseModel):
    """Configuration for the document-processing job client.

    Attributes:
        function_url: Absolute URL of the remote processing function
        api_key: Optional project key sent as `apikey` header
        request_timeout: Total seconds allowed per HTTP call
        freshness_margin: Seconds before expiry at which a token is refreshed
        submit_max_retries: Maximum re-submissions after transient failures
        retry_base_wait: Base wait (seconds) for exponential backoff
        retry_max_wait: Upper bound (seconds) for a single backoff wait
        poll_interval: Seconds between job status queries (float for test flexibility)
        poll_max_attempts: Maximum number of status queries per job
        poll_timeout: Maximum seconds spent polling a single job
    """

    function_url: str = Field(
        default="http://localhost:54321/functions/v1/process-pdf",
        description="Absolute URL of the remote processing function",
    )

    api_key: str | None = Field(
        default=None,
        description="Project key sent as 'apikey' header next to the bearer token",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Total timeout in seconds for each HTTP call to the processing function",
    )

    freshness_margin: float = Field(
        default=15 * 60,
        ge=0,
        description="Refresh the session when it expires within this many seconds",
    )

    submit_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retry attempts for transient submission errors",
    )

    retry_base_wait: float = Field(
        default=1.0,
        ge=0,
        description="Base wait time in seconds for exponential backoff between retries",
    )

    retry_max_wait: float = Field(
        default=5.0,
        ge=0,
        description="Maximum wait time in seconds between retry attempts",
    )

    poll_interval: float = Field(
        default=2.0,
        ge=0,
        description="Interval in seconds between job status queries",
    )

    poll_max_attempts: int = Field(
        default=60,
        ge=1,
        description="Maximum number of status queries before giving up",
    )

    poll_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Maximum time in seconds to wait for the job to reach a terminal state",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def from_app_settings(cls, settings) -> "JobClientConfig":
        """Factory method to construct config from a DocJobSettings instance."""
        return cls(
            function_url=settings.DOCJOB_FUNCTION_URL,
            api_key=(
                settings.DOCJOB_API_KEY.get_secret_value()
                if settings.DOCJOB_API_KEY
                else None
            ),
            request_timeout=settings.DOCJOB_REQUEST_TIMEOUT,
            freshness_margin=settings.DOCJOB_TOKEN_FRESHNESS_MARGIN,
            submit_max_retries=settings.DOCJOB_SUBMIT_MAX_RETRIES,
            poll_interval=settings.DOCJOB_POLL_INTERVAL,
            poll_max_attempts=settings.DOCJOB_POLL_MAX_ATTEMPTS,
            poll_timeout=settings.DOCJOB_POLL_TIMEOUT,
            # retry_base_wait and retry_max_wait use defaults (no settings exist)
        )
