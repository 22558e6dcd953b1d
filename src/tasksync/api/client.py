"""HTTP client for the remote sync server."""

import asyncio
from typing import Any, Optional

import httpx

from tasksync.config import APIConfig
from tasksync.utils.logger import get_logger

logger = get_logger("api")

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _is_retryable(error: Exception) -> bool:
    """Transport failures and 5xx responses are retried, 4xx never are."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.RequestError)


class APIClient:
    """Async httpx wrapper bound to the configured endpoint.

    Failed requests are retried ``config.retry`` times with exponential
    backoff (1s, 2s, 4s, ...).
    """

    def __init__(
        self,
        config: APIConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.base_url = config.endpoint.rstrip("/")
        self.timeout = config.timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict[str, str]:
        return dict(JSON_HEADERS)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._get_headers(),
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        retry: Optional[int] = None,
    ) -> httpx.Response:
        """Send a request, retrying retryable failures.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            httpx.RequestError: When the server could not be reached
        """
        attempts = (self.config.retry if retry is None else retry) + 1
        url = "/" + path.lstrip("/")
        client = await self._get_client()

        for attempt in range(attempts):
            try:
                response = await client.request(
                    method, url, json=json, params=params, headers=headers
                )
                response.raise_for_status()
                return response
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                if not _is_retryable(e) or attempt == attempts - 1:
                    raise
                logger.warning(
                    "%s %s failed (attempt %d of %d): %s", method, url, attempt + 1, attempts, e
                )
            await asyncio.sleep(2**attempt)

        raise RuntimeError("unreachable")

    async def get(
        self, path: str, *, params: Optional[dict[str, Any]] = None, retry: Optional[int] = None
    ) -> httpx.Response:
        return await self.request("GET", path, params=params, retry=retry)

    async def post(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        return await self.request("POST", path, json=json, headers=headers)
