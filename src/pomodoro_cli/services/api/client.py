"""HTTP client for the Pomodoro server."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from pomodoro_cli.services.config_service import ConfigService, get_config_service
from pomodoro_cli.utils.logger import get_module_logger

from .errors import api_error_from_payload, api_error_from_response

logger = get_module_logger("api")


class APIClient:
    """Async HTTP client for the Pomodoro server JSON API."""

    def __init__(self, config_service: ConfigService | None = None):
        self.config_service = config_service or get_config_service()
        self.config = self.config_service.config
        self.base_url = self.config.api.endpoint.rstrip("/")
        self.timeout = self.config.api.timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers, with the stored bearer token when there is one."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        credentials = self.config_service.load_credentials()
        if credentials and "token" in credentials:
            headers["Authorization"] = f"Bearer {credentials['token']}"

        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        # Pick up a token saved since the client was created
        self._client.headers.update(self._get_headers())
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry: int | None = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Server errors and transport errors are retried with exponential
        backoff; client errors (4xx) are raised immediately.
        """
        if retry is None:
            retry = self.config.api.retry

        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            logger.warning(
                "%s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                retry + 1,
                last_exception,
            )
            if attempt < retry:
                await asyncio.sleep(2**attempt)

        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry: int | None = None,
    ) -> dict[str, Any]:
        """Make a request and return the decoded body of a successful response.

        Raises:
            APIError: The server answered with an error status or ``success: false``
            ReauthRequiredError: The failure carried ``reauth: true`` or was a 401
            httpx.RequestError: The server could not be reached
        """
        try:
            response = await self.request(
                method, path, json=json, params=params, retry=retry
            )
        except httpx.HTTPStatusError as e:
            raise api_error_from_response(e.response) from e

        data = response.json()
        if not isinstance(data, dict):
            raise api_error_from_payload(None, response.status_code)
        if data.get("success") is False:
            raise api_error_from_payload(data, response.status_code)
        return data


def get_client() -> APIClient:
    """Get an API client instance."""
    return APIClient()
