"""HTTP connection pooling for provider calls.

All adapters share one lazily created ``httpx.AsyncClient`` so repeated
generations reuse connections instead of paying a TLS handshake each time.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from .base import WireRequest


class HTTPConnectionPool:
    """Manages a shared ``httpx.AsyncClient`` for provider requests."""

    def __init__(
        self,
        max_connections: int = 20,
        max_keepalive_connections: int = 5,
        keepalive_expiry: float = 5.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the connection pool.

        Args:
            max_connections: Maximum number of connections to maintain
            max_keepalive_connections: Max idle connections to keep alive
            keepalive_expiry: How long to keep idle connections (seconds)
            timeout: Default timeout for requests (seconds)
            transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
        """
        self.max_connections = max_connections
        self.max_keepalive_connections = max_keepalive_connections
        self.keepalive_expiry = keepalive_expiry
        self.timeout = timeout
        self.transport = transport

        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
            keepalive_expiry=keepalive_expiry,
        )

        self.timeout_config = httpx.Timeout(
            timeout=timeout,
            connect=5.0,
            read=timeout,
            write=10.0,
        )

        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure we have an active client instance."""
        if self._client is None:
            async with self._lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        limits=self.limits,
                        timeout=self.timeout_config,
                        http2=True,
                        transport=self.transport,
                    )
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request using the connection pool."""
        client = await self._ensure_client()

        if "timeout" in kwargs:
            kwargs["timeout"] = httpx.Timeout(kwargs["timeout"])

        return await client.request(method, url, **kwargs)

    async def send(self, wire: WireRequest, timeout: float) -> httpx.Response:
        """Send an adapter-built request."""
        return await self.request(
            wire.method,
            wire.url,
            headers=wire.headers,
            params=wire.params or None,
            json=wire.json_body,
            timeout=timeout,
        )

    async def close(self):
        """Close the connection pool and cleanup resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
