"""Async HTTP session manager.

Owns one lazily created ``aiohttp.ClientSession`` per remote. Each tier
builds its own managers; there is no process-wide session.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from steamdb_companion.shared.constants import NetworkConfig, OriginConfig

logger = logging.getLogger(__name__)


class AsyncSessionManager:
    """Manages the lifecycle of one aiohttp session.

    Args:
        user_agent: User-Agent header sent with every request
        timeout: Default total timeout in seconds (callers may override per call)
        accept: Accept header
        connector_limit: Total connection pool size
        limit_per_host: Per-host connection limit
    """

    def __init__(
        self,
        user_agent: str = OriginConfig.USER_AGENT,
        timeout: float = NetworkConfig.DEFAULT_TIMEOUT,
        accept: str = OriginConfig.ACCEPT,
        connector_limit: int = NetworkConfig.CONNECTOR_LIMIT,
        limit_per_host: int = NetworkConfig.CONNECTOR_LIMIT_PER_HOST,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.accept = accept
        self.connector_limit = connector_limit
        self.limit_per_host = limit_per_host
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=self.connector_limit,
            limit_per_host=self.limit_per_host,
            keepalive_timeout=NetworkConfig.KEEPALIVE_TIMEOUT,
            enable_cleanup_closed=True,
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={
                "User-Agent": self.user_agent,
                "Accept": self.accept,
            },
            raise_for_status=False,
        )
        logger.debug("aiohttp.ClientSession created (user agent %s)", self.user_agent)
        return session

    async def close_session(self) -> None:
        """Close the HTTP session and release its connections."""
        async with self._session_lock:
            if self._session is not None and not self._session.closed:
                try:
                    await self._session.close()
                    logger.debug("aiohttp.ClientSession closed")
                except aiohttp.ClientError as e:
                    logger.warning("Error closing aiohttp.ClientSession: %s", e)
                finally:
                    self._session = None

    def is_session_ready(self) -> bool:
        return self._session is not None and not self._session.closed

    async def __aenter__(self) -> AsyncSessionManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close_session()
