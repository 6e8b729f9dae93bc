"""Rate-limited HTTP client for one remote.

Every request to a remote (SteamDB itself, the edge gateway, the Steam store
API) goes through the same pipeline:

    permissibility check -> semaphore -> token bucket -> send with retry

The permissibility check fails fast while the state machine is throttling
or in cache-only mode, so callers fall back to cached data instead of
sleeping on a rate-limited origin.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urljoin

import aiohttp
import orjson

from steamdb_companion.shared.constants import NetworkConfig
from steamdb_companion.shared.errors import (
    ErrorCode,
    OriginError,
    create_origin_error,
)
from steamdb_companion.shared.logging import log_api_call, log_operation_error

from .rate_limiter import TokenBucketRateLimiter
from .session_manager import AsyncSessionManager
from .state_machine import RateLimitState, RateLimitStateMachine

logger = logging.getLogger(__name__)


class OriginClient:
    """HTTP client with rate limiting, concurrency control and retries.

    Args:
        session_manager: Owns the aiohttp session
        base_url: Root URL every path is joined onto
        rate_limiter: Token bucket pacing the requests
        state_machine: Tracks 429s and the error rate
        timeout: Total timeout per request in seconds
        retry_attempts: Extra attempts for retryable failures
        retry_delay: First backoff delay in seconds, doubled per attempt
        concurrent_requests: Maximum requests in flight
        name: Label used in logs
    """

    def __init__(
        self,
        session_manager: AsyncSessionManager,
        base_url: str,
        *,
        rate_limiter: TokenBucketRateLimiter | None = None,
        state_machine: RateLimitStateMachine | None = None,
        timeout: float = NetworkConfig.DEFAULT_TIMEOUT,
        retry_attempts: int = NetworkConfig.DEFAULT_RETRY_ATTEMPTS,
        retry_delay: float = NetworkConfig.DEFAULT_RETRY_DELAY,
        concurrent_requests: int = NetworkConfig.DEFAULT_CONCURRENT_REQUESTS,
        name: str = "origin",
    ) -> None:
        self.session_manager = session_manager
        self.base_url = base_url.rstrip("/") + "/"
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter()
        self.state_machine = state_machine or RateLimitStateMachine()
        self.timeout = timeout
        self.retry_attempts = max(0, retry_attempts)
        self.retry_delay = retry_delay
        self.name = name
        self._semaphore = asyncio.Semaphore(max(1, concurrent_requests))

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def fetch_text(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        """GET ``path`` and return the body as text."""
        body = await self._make_request("GET", path, params=params)
        return body.decode("utf-8", errors="replace")

    async def fetch_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        return await self.request_json(path, params=params)

    async def request_json(
        self,
        path: str,
        *,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send a request and decode its JSON body.

        Raises:
            OriginError: On any transport, status or decoding failure
        """
        body = await self._make_request(method, path, params=params, json_body=json_body)
        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            error = create_origin_error(
                ErrorCode.ORIGIN_INVALID_RESPONSE,
                f"{self.name} returned a body that is not JSON",
                self.url_for(path),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="decode_json")
            raise error from e

    async def _make_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> bytes:
        url = self.url_for(path)
        self._check_request_permissibility(url)

        async with self._semaphore:
            await self.rate_limiter.acquire()
            return await self._execute_with_retry(method, url, params, json_body)

    def _check_request_permissibility(self, url: str) -> None:
        if self.state_machine.should_make_request():
            return

        if self.state_machine.state is RateLimitState.CACHE_ONLY:
            message = f"{self.name} in cache-only mode due to high error rate"
        else:
            message = f"{self.name} is throttled for another {self.state_machine.get_retry_delay():.1f}s"

        error = create_origin_error(ErrorCode.ORIGIN_RATE_LIMITED, message, url)
        log_operation_error(logger=logger, error=error, operation="origin_request", level=logging.WARNING)
        raise error

    async def _execute_with_retry(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None,
        json_body: Any,
    ) -> bytes:
        last_error: OriginError | None = None

        for attempt in range(self.retry_attempts + 1):
            try:
                body = await self._send(method, url, params, json_body)
            except OriginError as e:
                last_error = e
                if not e.retryable or attempt == self.retry_attempts:
                    break
                delay = self.retry_delay * (2**attempt)
                logger.debug(
                    "Retrying %s %s in %.2fs (attempt %d/%d): %s",
                    method,
                    url,
                    delay,
                    attempt + 1,
                    self.retry_attempts,
                    e.message,
                )
                await asyncio.sleep(delay)
                continue

            self.state_machine.handle_success()
            return body

        assert last_error is not None
        log_operation_error(logger=logger, error=last_error, operation="origin_request")
        raise last_error

    async def _send(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None,
        json_body: Any,
    ) -> bytes:
        session = await self.session_manager.get_session()
        started = time.perf_counter()

        try:
            async with session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json_body,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                status = response.status
                retry_after = self._extract_retry_after(response.headers)
                body = await response.read()
        except asyncio.TimeoutError as e:
            self.state_machine.handle_error(0)
            raise create_origin_error(
                ErrorCode.ORIGIN_TIMEOUT,
                f"{self.name} request timed out after {self.timeout}s",
                url,
                retryable=True,
                original_error=e,
            ) from e
        except aiohttp.ClientError as e:
            self.state_machine.handle_error(0)
            raise create_origin_error(
                ErrorCode.ORIGIN_CONNECTION_ERROR,
                f"{self.name} connection failed: {e}",
                url,
                retryable=True,
                original_error=e,
            ) from e

        log_api_call(
            logger,
            endpoint=url,
            method=method,
            status_code=status,
            duration_ms=(time.perf_counter() - started) * 1000,
            context={"remote": self.name},
        )

        if status == 429:
            self.state_machine.handle_429(retry_after)
            raise create_origin_error(
                ErrorCode.ORIGIN_RATE_LIMITED,
                "SteamDB rate limit reached.",
                url,
                status_code=status,
            )
        if status >= 500:
            self.state_machine.handle_error(status)
            raise create_origin_error(
                ErrorCode.ORIGIN_SERVER_ERROR,
                f"SteamDB upstream error: {status}",
                url,
                status_code=status,
                retryable=True,
            )
        if status >= 400:
            raise create_origin_error(
                ErrorCode.ORIGIN_REQUEST_FAILED,
                f"SteamDB upstream error: {status}",
                url,
                status_code=status,
            )
        return body

    @staticmethod
    def _extract_retry_after(headers: Mapping[str, str]) -> float | None:
        """Retry-After in seconds, or None when absent or not a number."""
        raw = headers.get("Retry-After")
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.debug("Ignoring unparseable Retry-After header: %r", raw)
            return None

    def get_stats(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rate_limiter": {
                "tokens_available": self.rate_limiter.get_tokens_available(),
                "capacity": self.rate_limiter.capacity,
                "refill_rate": self.rate_limiter.refill_rate,
            },
            "state_machine": self.state_machine.get_stats(),
        }

    def reset(self) -> None:
        self.rate_limiter.reset()
        self.state_machine.reset()

    async def close(self) -> None:
        await self.session_manager.close_session()
