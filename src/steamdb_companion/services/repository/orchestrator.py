"""Fetch orchestration: fresh cache, then remote, then stale cache.

For one key the orchestrator decides whether to trust the cache, call the
producer, or fall back to whatever record exists:

    HIT                    -> (fresh, cache)
    MISS -> REMOTE_SUCCESS -> (fresh, remote), value written to the store
    MISS -> REMOTE_FAIL -> STALE_HIT  -> (stale, cache)
                        -> STALE_MISS -> UpstreamError

Concurrent misses for one key are not merged: each caller runs its own
producer and the last write wins.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from steamdb_companion.services.cache import KeyedCacheStore
from steamdb_companion.shared.errors import ErrorContext, UpstreamError
from steamdb_companion.shared.logging import log_operation_error, log_operation_success

from .models import DataSource, Freshness, FreshnessResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
Producer = Callable[[], Awaitable[T]]

_INVALID = object()


class FetchOrchestrator:
    """Runs the fresh/remote/stale decision for one store.

    Args:
        store: The cache store for this tier
        name: Label used in log records (e.g. "edge", "client")
    """

    def __init__(self, store: KeyedCacheStore, name: str = "orchestrator") -> None:
        self.store = store
        self.name = name
        self._pending: set[asyncio.Task[Any]] = set()

    async def fetch(
        self,
        key: str,
        ttl: float,
        producer: Producer[T],
        *,
        force_refresh: bool = False,
        model: Any = None,
    ) -> FreshnessResult[T]:
        """Return the best available value for ``key``.

        Args:
            key: Cache key; must encode every parameter of the request
            ttl: Seconds a cached value is preferred over a live call
            producer: Zero-argument coroutine function doing the remote call
            force_refresh: Skip the fresh-cache check
            model: Optional type the cached JSON is validated into (and the
                producer's value dumped from)

        Raises:
            UpstreamError: The producer failed and no record exists for ``key``
        """
        adapter = TypeAdapter(model) if model is not None else None

        if not force_refresh:
            cached = await self.store.get(key, ttl)
            if cached is not None:
                value = self._decode(key, cached, adapter)
                if value is not _INVALID:
                    logger.debug("[%s] cache hit for '%s'", self.name, key)
                    return FreshnessResult(value, Freshness.FRESH, DataSource.CACHE)

        # The attempt runs as its own task so a caller that gives up does
        # not cancel the producer; its result still lands in the cache.
        attempt = asyncio.ensure_future(self._remote_attempt(key, producer, adapter))
        self._pending.add(attempt)
        attempt.add_done_callback(self._attempt_done)

        try:
            value = await asyncio.shield(attempt)
        except Exception as e:  # noqa: BLE001
            return await self._stale_fallback(key, ttl, adapter, e)

        return FreshnessResult(value, Freshness.FRESH, DataSource.REMOTE)

    @property
    def pending_writes(self) -> int:
        """Remote attempts still running, including abandoned ones."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every running remote attempt to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _remote_attempt(self, key: str, producer: Producer[T], adapter: TypeAdapter | None) -> T:
        started = time.perf_counter()
        value = await producer()

        encoded = adapter.dump_python(value, mode="json") if adapter is not None else value
        await self.store.put(key, encoded)

        log_operation_success(
            logger=logger,
            operation="remote_fetch",
            duration_ms=(time.perf_counter() - started) * 1000,
            context={"cache_key": key, "tier": self.name},
        )
        return value

    def _attempt_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if not task.cancelled():
            # Mark the exception retrieved; abandoned attempts have no awaiter.
            task.exception()

    async def _stale_fallback(
        self,
        key: str,
        ttl: float,
        adapter: TypeAdapter | None,
        cause: Exception,
    ) -> FreshnessResult[Any]:
        stale = await self.store.get_allow_stale(key, ttl)
        if stale is not None:
            value = self._decode(key, stale.value, adapter)
            if value is not _INVALID:
                logger.warning(
                    "[%s] serving stale '%s' (age %.0fs) after remote failure: %s",
                    self.name,
                    key,
                    stale.age,
                    cause,
                )
                return FreshnessResult(value, Freshness.STALE, DataSource.CACHE, age=stale.age)

        error = UpstreamError(
            f"Remote fetch failed and nothing is cached for '{key}': {cause}",
            context=ErrorContext(
                operation="fetch",
                cache_key=key,
                additional_data={"tier": self.name, "cause": type(cause).__name__},
            ),
            original_error=cause,
        )
        log_operation_error(logger=logger, error=error, operation="fetch", level=logging.WARNING)
        raise error from cause

    def _decode(self, key: str, raw: Any, adapter: TypeAdapter | None) -> Any:
        if adapter is None:
            return raw
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning(
                "[%s] cached value for '%s' no longer validates; ignoring it: %s",
                self.name,
                key,
                e.error_count(),
            )
            return _INVALID
