"""
HTTP client utilities for depscout.

This module provides the asynchronous HTTP client shared by the
resolvers, the GitHub client, and file downloads. Every request is a
single attempt: non-success status codes are returned to the caller,
which decides what a failed lookup means, while transport failures
(DNS errors, refused or reset connections, timeouts) are raised as
:class:`~depscout.exceptions.NetworkError`.
"""

from __future__ import annotations

import httpx
import asyncio
from typing import Any, Optional, Dict, Mapping

from depscout.utils.logger import get_logger
from depscout.__version__ import __version__
from depscout.exceptions import NetworkError
from depscout.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_CONCURRENCY,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with concurrency control.

    Args:
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.
        headers: Extra headers sent with every request.

    Example:
        >>> async with HTTPClient() as client:
        ...     response = await client.get("https://registry.npmjs.org/left-pad")
        ...     response.status_code
        200
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency
        self.headers: Dict[str, str] = dict(headers or {})

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, **self.headers},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request and return the response whatever its status.

        Raises:
            NetworkError: The transport failed before a response arrived.
        """
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")

        try:
            async with self._semaphore:
                response = await self._client.request(method, clean_url, **kwargs)
        except httpx.TransportError as exc:
            logger.debug("Transport error for %s: %s", clean_url, exc)
            raise NetworkError(
                f"Request to {clean_url} failed: {exc}",
                url=clean_url,
            ) from exc

        logger.debug("%s %s -> %d", method, clean_url, response.status_code)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self.request("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Optional[Any]:
        """Fetch a URL and parse the body as JSON.

        Returns:
            Parsed JSON, or ``None`` if the server answered with a
            non-success status.

        Raises:
            NetworkError: Transport failure or a body that is not JSON.
        """
        response = await self.get(url, **kwargs)
        if not response.is_success:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                status_code=response.status_code,
                response_body=response.text,
            ) from exc
