"""
HTTP transport using httpx for async requests.

Provides:
- Per-request timeouts
- Lazy client creation with connection reuse
- Mapping of httpx failures onto NetworkError / RequestTimeoutError
"""

from __future__ import annotations

import os
from contextlib import suppress
from typing import Any

import httpx

from interview_ai.errors import NetworkError, RequestTimeoutError
from interview_ai.transport.base import TransportResponse

# Default timeouts
_DEFAULT_CONNECT_TIMEOUT = 10.0


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("INTERVIEW_AI_HTTP_TRUST_ENV", "0") == "1"


class HttpTransport:
    """HTTP transport for the inference service.

    Example:
        >>> transport = HttpTransport("https://ai.example.com")
        >>> response = await transport.send("/api/health", "GET", None, {}, 5000)
        >>> await transport.close()
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            base_url: Service base URL; endpoints are joined onto it
            client: Optional preconfigured client (not closed by close())
        """
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                trust_env=_trust_env_enabled(),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        endpoint: str,
        method: str,
        body: dict[str, Any] | None,
        headers: dict[str, str],
        timeout_ms: float,
    ) -> TransportResponse:
        """Make an HTTP request.

        Args:
            endpoint: Request path relative to the base URL
            method: HTTP method
            body: JSON body
            headers: Request headers
            timeout_ms: Overall request timeout

        Returns:
            TransportResponse, whatever the status code

        Raises:
            RequestTimeoutError: If the service did not answer in time
            NetworkError: On connection or protocol failures
        """
        client = self._get_client()
        url = f"{self._base_url}{endpoint}"
        timeout = httpx.Timeout(
            timeout_ms / 1000.0,
            connect=min(_DEFAULT_CONNECT_TIMEOUT, timeout_ms / 1000.0),
        )

        try:
            response = await client.request(
                method=method,
                url=url,
                json=body,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Request timed out: {e}",
                url=url,
                cause=e,
            ) from e
        except httpx.ConnectError as e:
            raise NetworkError(
                f"Connection failed: {e}",
                url=url,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                f"HTTP error: {e}",
                url=url,
                cause=e,
            ) from e

        parsed: Any = None
        if response.content:
            with suppress(ValueError):
                parsed = response.json()

        return TransportResponse(
            status_code=response.status_code,
            body=parsed,
            headers={k.lower(): v for k, v in response.headers.items()},
        )
