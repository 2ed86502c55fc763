"""
Shared HTTP client with connection pooling.

One pooled httpx.AsyncClient serves every outbound call (question sheet
lookups). It is opened in the app lifespan and closed on shutdown.

Usage:
    from dropjournal.services.http_client import http_client_manager

    client = await http_client_manager.get_client()
    response = await client.get("https://sheets.googleapis.com/...")
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger("DropJournal.HTTP.Client")


class HTTPClientManager:
    """
    Manages the shared httpx.AsyncClient.

    Configuration:
    - max_connections: Maximum total connections (default: 50)
    - max_keepalive_connections: Max idle connections to keep (default: 10)
    - default_timeout: Default request timeout in seconds (default: 15.0)
    """

    def __init__(
        self,
        max_connections: int = 50,
        max_keepalive_connections: int = 10,
        default_timeout: float = 15.0,
    ):
        self._max_connections = max_connections
        self._max_keepalive_connections = max_keepalive_connections
        self._default_timeout = default_timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self._max_connections,
            max_keepalive_connections=self._max_keepalive_connections,
        )

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def startup(self) -> None:
        """Open the pooled client. Called from the app lifespan."""
        if self._client is not None:
            logger.warning("HTTP client manager already initialized")
            return

        self._client = httpx.AsyncClient(
            limits=self.limits,
            timeout=httpx.Timeout(self._default_timeout),
            follow_redirects=True,
        )
        logger.info(
            f"HTTP client manager initialized "
            f"(max_connections={self._max_connections}, "
            f"max_keepalive={self._max_keepalive_connections})"
        )

    async def shutdown(self) -> None:
        """Close the pooled client and release all connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client manager shut down")

    async def get_client(self) -> httpx.AsyncClient:
        """
        Get the shared client, opening it on first use if startup() was skipped.
        """
        if self._client is None:
            logger.warning("HTTP client accessed before startup - initializing now")
            await self.startup()
        return self._client


http_client_manager = HTTPClientManager()
