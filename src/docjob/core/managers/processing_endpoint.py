"""Authenticated calls to the remote processing function.

Both submission and status queries go through `invoke`, which fetches a fresh
token immediately before every request and classifies the raw response:

- 401 -> AuthError (re-authentication required, never retried)
- body flagged `deploymentIssue` -> ConfigurationError
- any other non-2xx or a non-JSON body -> TransientError
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from docjob.core.exceptions import AuthError, ConfigurationError, TransientError
from docjob.core.interfaces.http_client import HttpClientPort
from docjob.core.managers.token_manager import TokenManager
from docjob.core.settings import logger

UNAUTHORIZED = 401


def _snippet(body: Any, limit: int = 200) -> Optional[str]:
    if body is None:
        return None
    return str(body)[:limit]


class ProcessingEndpoint:
    def __init__(
        self,
        http_client: HttpClientPort,
        tokens: TokenManager,
        url: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._http = http_client
        self._tokens = tokens
        self._url = url
        self._api_key = api_key
        self._timeout = timeout

    async def invoke(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST `payload` with a freshly validated token and return the JSON body."""
        session = await self._tokens.get_valid_token()
        headers = {"Authorization": f"Bearer {session.access_token}"}
        if self._api_key:
            headers["apikey"] = self._api_key

        resp = await self._http.post(
            self._url, json=payload, timeout=self._timeout, headers=headers
        )
        status = resp.get("status")
        body = resp.get("body")
        logger.debug(
            f"[endpoint:invoke] POST completed status={status} body_type={type(body).__name__}"
        )

        if status == UNAUTHORIZED:
            logger.warning("[endpoint:invoke] processing function rejected token (401)")
            raise AuthError(
                "Authentication failed. Please sign out and sign back in.",
                requires_reauth=True,
                diagnostic=_snippet(body),
            )

        if isinstance(body, dict) and body.get("deploymentIssue"):
            raise ConfigurationError(
                body.get("error") or "Processing function not configured",
                fix_instructions=body.get("fixInstructions"),
                diagnostic=f"status={status}",
            )

        if status is None or not 200 <= status < 300:
            raise TransientError(
                f"Processing function returned HTTP {status}",
                status=status,
                diagnostic=_snippet(body),
            )

        if not isinstance(body, dict):
            raise TransientError(
                "Processing function returned a malformed payload",
                status=status,
                diagnostic=_snippet(body),
            )
        return body
