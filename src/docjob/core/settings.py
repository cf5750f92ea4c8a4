from pydantic import HttpUrl, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings
from rich import print

# Logging adapter for application-wide logging
from docjob.adapters.logging_adapter import LoggingAdapter
from docjob.core.interfaces.logging import LoggingPort

# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class DocJobSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }
    DOCJOB_LOG_LEVEL: str = "INFO"
    # Base URL of the backend hosting the processing function
    DOCJOB_FUNCTIONS_URL: HttpUrl = HttpUrl("http://localhost:54321")
    DOCJOB_FUNCTION_NAME: str = "process-pdf"
    # Project (anon) key sent as `apikey` header alongside the bearer token
    DOCJOB_API_KEY: SecretStr | None = None
    DOCJOB_REQUEST_TIMEOUT: float = 30.0  # seconds per HTTP call
    DOCJOB_TOKEN_FRESHNESS_MARGIN: int = 15 * 60  # seconds
    DOCJOB_SUBMIT_MAX_RETRIES: int = 3
    DOCJOB_POLL_INTERVAL: float = 2.0  # seconds
    DOCJOB_POLL_MAX_ATTEMPTS: int = 60
    DOCJOB_POLL_TIMEOUT: float = 120.0  # seconds
    DOCJOB_KEYCLOAK_URL: HttpUrl | None = HttpUrl("http://keycloak:8080/auth/")
    DOCJOB_KEYCLOAK_REALM: str = "docjob"
    DOCJOB_KEYCLOAK_CLIENT_ID: str = "docjob-client"
    DOCJOB_KEYCLOAK_CLIENT_SECRET: SecretStr | None = None
    DOCJOB_KEYCLOAK_USER: str | None = None
    DOCJOB_KEYCLOAK_PASSWORD: SecretStr | None = None

    @computed_field
    @property
    def DOCJOB_FUNCTION_URL(self) -> str:
        """Constructs the full URL of the processing function endpoint"""
        return str(self.DOCJOB_FUNCTIONS_URL).rstrip("/") + f"/functions/v1/{self.DOCJOB_FUNCTION_NAME}"

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("docjob settings:")
        print(self)

    @field_validator("DOCJOB_KEYCLOAK_URL", mode="before")
    def ensure_trailing_slash(cls, value):
        """Ensure DOCJOB_KEYCLOAK_URL has a trailing slash."""
        if isinstance(value, str) and not value.endswith("/"):
            value += "/"
        return value


app_settings = DocJobSettings()

logger = LoggingAdapter("docjob", app_settings.DOCJOB_LOG_LEVEL)
