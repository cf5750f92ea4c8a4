import logging

import pytest
from pydantic import ValidationError

from docjob.core.config import JobClientConfig
from docjob.core.logging_config import coerce_level
from docjob.core.settings import DocJobSettings


def test_settings_build_function_url(monkeypatch):
    monkeypatch.setenv("DOCJOB_FUNCTIONS_URL", "https://project.example.org/")
    monkeypatch.setenv("DOCJOB_FUNCTION_NAME", "process-pdf")

    settings = DocJobSettings(_env_file=None)

    assert settings.DOCJOB_FUNCTION_URL == "https://project.example.org/functions/v1/process-pdf"


def test_keycloak_url_gets_trailing_slash(monkeypatch):
    monkeypatch.setenv("DOCJOB_KEYCLOAK_URL", "http://keycloak:8080/auth")

    settings = DocJobSettings(_env_file=None)

    assert str(settings.DOCJOB_KEYCLOAK_URL).endswith("/auth/")


def test_config_from_app_settings(monkeypatch):
    monkeypatch.setenv("DOCJOB_API_KEY", "anon-key")
    monkeypatch.setenv("DOCJOB_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("DOCJOB_POLL_MAX_ATTEMPTS", "10")
    monkeypatch.setenv("DOCJOB_SUBMIT_MAX_RETRIES", "2")

    config = JobClientConfig.from_app_settings(DocJobSettings(_env_file=None))

    assert config.api_key == "anon-key"
    assert config.poll_interval == 0.5
    assert config.poll_max_attempts == 10
    assert config.submit_max_retries == 2
    assert config.function_url.endswith("/functions/v1/process-pdf")


def test_config_defaults():
    config = JobClientConfig()

    assert config.freshness_margin == 900
    assert config.submit_max_retries == 3
    assert config.poll_interval == 2.0
    assert config.poll_max_attempts == 60
    assert config.poll_timeout == 120.0


def test_config_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        JobClientConfig(poll_every=3)


@pytest.mark.parametrize(
    "value, expected",
    [("debug", logging.DEBUG), ("INFO", logging.INFO), (logging.WARNING, logging.WARNING), ("bogus", logging.INFO)],
)
def test_coerce_level(value, expected):
    assert coerce_level(value) == expected
