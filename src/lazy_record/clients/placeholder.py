"""
JSONPlaceholder API client.

Minimal async access to a JSONPlaceholder-style REST API
(https://jsonplaceholder.typicode.com/), used as a loader backend by the
demo records.
"""

import logging
from typing import Any

import httpx

from lazy_record.models import DEFAULT_API_BASE

logger = logging.getLogger(__name__)

# Request timeout in seconds
REQUEST_TIMEOUT = 30.0

USER_AGENT = "lazy-record/1.0"


class PlaceholderClient:
    """Client for a JSONPlaceholder-style REST API."""

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_base: Base URL of the API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_base = api_base
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_base,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PlaceholderClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_json(self, path: str) -> dict[str, Any]:
        client = await self._get_client()
        response = await client.get(path)
        response.raise_for_status()
        return response.json()

    async def get_todo(self, todo_id: int) -> dict[str, Any]:
        """
        Fetch one todo.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
        """
        logger.debug(f"GET todos/{todo_id}")
        return await self._get_json(f"todos/{todo_id}")

    async def get_user(self, user_id: int) -> dict[str, Any]:
        """
        Fetch one user.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
        """
        logger.debug(f"GET users/{user_id}")
        return await self._get_json(f"users/{user_id}")
