# main.py
import argparse
import asyncio
import sys

from keycloak.exceptions import KeycloakError
from rich import print

from docjob.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from docjob.adapters.keycloak_identity_adapter import KeycloakIdentityAdapter
from docjob.adapters.retry_tenacity import TenacityRetryAdapter
from docjob.core.config import JobClientConfig
from docjob.core.exceptions import AuthError, ConfigurationError, JobClientError
from docjob.core.logging_config import configure_logging
from docjob.core.managers.job_client import JobClient
from docjob.core.managers.job_poller import JobPoller
from docjob.core.managers.job_submitter import JobSubmitter
from docjob.core.managers.processing_endpoint import ProcessingEndpoint
from docjob.core.managers.retry_policy import RetryPolicy
from docjob.core.managers.token_manager import TokenManager
from docjob.core.models.job import SubmissionRequest
from docjob.core.models.record import BookRecord
from docjob.core.settings import app_settings, logger


# main lives at the outermost layer (not in core)
# Instantiates all the concrete adapters
# Wires dependencies together
# Runs one document through the job client

def build_job_client(config: JobClientConfig, http_client, identity) -> JobClient:
    tokens = TokenManager(identity, freshness_margin=config.freshness_margin)
    endpoint = ProcessingEndpoint(
        http_client,
        tokens,
        url=config.function_url,
        api_key=config.api_key,
        timeout=config.request_timeout,
    )
    policy = RetryPolicy.from_config(config)
    return JobClient(
        submitter=JobSubmitter(endpoint),
        poller=JobPoller.from_config(endpoint, config),
        retry_port=TenacityRetryAdapter(policy),
        retry_policy=policy,
    )


async def run(document_url: str, record_id: str | None) -> int:
    config = JobClientConfig.from_app_settings(app_settings)
    identity = KeycloakIdentityAdapter.from_app_settings(app_settings)

    if not app_settings.DOCJOB_KEYCLOAK_USER or not app_settings.DOCJOB_KEYCLOAK_PASSWORD:
        logger.error("DOCJOB_KEYCLOAK_USER and DOCJOB_KEYCLOAK_PASSWORD must be set")
        return 2
    try:
        await identity.sign_in(
            app_settings.DOCJOB_KEYCLOAK_USER,
            app_settings.DOCJOB_KEYCLOAK_PASSWORD.get_secret_value(),
        )
    except KeycloakError as exc:
        logger.error(f"[identity:sign-in] sign-in failed err={exc}")
        print(f"[red]{AuthError.user_message}[/red] {exc}")
        return 1

    request = SubmissionRequest(document_url=document_url, record_id=record_id)
    async with AioHttpClientAdapter(default_total=config.request_timeout) as http_client:
        client = build_job_client(config, http_client, identity)
        try:
            outcome = await client.process_document(request, BookRecord(id=record_id))
        except ConfigurationError as exc:
            print(f"[red]{exc.user_message}[/red] {exc.message}")
            if exc.fix_instructions:
                print(exc.fix_instructions)
            return 1
        except JobClientError as exc:
            print(f"[red]{exc.user_message}[/red] {exc.message}")
            return 1
        finally:
            await client.shutdown()
            await identity.sign_out()

    print(outcome.message)
    print(outcome.record.model_dump())
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="docjob",
        description="Submit a stored document for processing and print the extracted chapters.",
    )
    parser.add_argument("document_url", help="URL of the uploaded document")
    parser.add_argument("--record-id", default=None, help="Identifier of the record being edited")
    parser.add_argument("--show-settings", action="store_true", help="Print effective settings first")
    args = parser.parse_args(argv)

    # Central logging configuration before anything emits
    configure_logging(app_settings.DOCJOB_LOG_LEVEL)
    if args.show_settings:
        app_settings.print_settings(logger)

    return asyncio.run(run(args.document_url, args.record_id))


if __name__ == "__main__":
    sys.exit(main())
