# docjob/adapters/aiohttp_client_adapter.py
import asyncio
import aiohttp
from typing import Any, Dict, Optional

from docjob.core.interfaces.http_client import HttpClientPort
from docjob.core.exceptions import TransientError
from docjob.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(self, default_total: float = 30.0):
        self._session: Optional[aiohttp.ClientSession] = None
        # Per-field timeouts used when callers do not provide one
        self._default_total: float = default_total
        self._default_sock_read: float = default_total
        self._default_sock_connect: float = 5.0
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _client_timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Keep adapter-level sock_connect but apply provided total
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_read=timeout,
            sock_connect=self._default_sock_connect,
        )

    async def post(self, url: str, json: Dict[str, Any] | None, timeout: float | None = None, headers: Dict[str, str] | None = None) -> Dict[str, Any]:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        try:
            async with self._session.post(url, json=json, timeout=self._client_timeout(timeout), headers=headers) as response:
                # status is always returned; 401 is classified by the caller
                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    body = await response.text()

                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": body,
                }

        except asyncio.TimeoutError:
            logger.warning("[http:post] timeout url=%s", url)
            raise TransientError(
                "The request to the processing function timed out.",
                status=504,
            )
        except aiohttp.ClientResponseError as client_response_err:
            logger.warning("[http:post] http error url=%s status=%s err=%s", url, client_response_err.status, client_response_err)
            raise TransientError(
                f"The processing function returned an HTTP error: {client_response_err.status}",
                status=client_response_err.status,
                diagnostic=str(client_response_err),
            )
        except aiohttp.ClientError as client_err:
            logger.warning("[http:post] connection error url=%s err=%s", url, client_err)
            raise TransientError(
                "There was a connection error with the processing function.",
                status=502,
                diagnostic=str(client_err),
            )
