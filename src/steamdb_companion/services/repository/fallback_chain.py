"""Fallback chain coordination.

A logical query (e.g. "search for portal") can be answered by several
sources of decreasing preference: the edge gateway's structured API, a
direct scrape of SteamDB, the public Steam store API, and finally whatever
the client cached last time. Each source is one ``FallbackStep``; the
chain walks the steps in order through the orchestrator and stops at the
first one that yields usable data.

Collection queries and single-entity queries end differently when every
step is exhausted:

* ``fetch_collection`` never raises. It returns an empty result flagged
  ``exhausted``.
* ``fetch_entity`` has no empty sentinel, so it re-raises the last step's
  error (or ``ChainExhaustedError`` when the steps were merely empty).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence, Sized
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from steamdb_companion.shared.errors import (
    CacheOnlyStepError,
    ChainExhaustedError,
    ErrorContext,
)

from .models import ChainResult, DataSource, Freshness
from .orchestrator import FetchOrchestrator, Producer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FallbackStep(Generic[T]):
    """One source for a logical query.

    Attributes:
        cache_key: Key the orchestrator caches this step's result under
        ttl: Seconds the cached result is preferred over a live call
        producer: Zero-argument coroutine function calling the source
        name: Label for logs and ``ChainResult.step_name``
        model: Optional type the cached JSON is validated into
        cache_only: The step never calls out; it only serves its cache record
    """

    cache_key: str
    ttl: float
    producer: Producer[T]
    name: str = ""
    model: Any = None
    cache_only: bool = False

    @property
    def label(self) -> str:
        return self.name or self.cache_key

    @classmethod
    def cache_only_step(
        cls,
        cache_key: str,
        ttl: float,
        *,
        name: str = "legacy-cache",
        model: Any = None,
    ) -> FallbackStep[Any]:
        """A step that serves whatever is cached under ``cache_key``.

        Its producer always raises, so the orchestrator answers from the
        record (fresh or stale) or raises ``UpstreamError`` when there is none.
        """

        async def _no_remote() -> Any:
            raise CacheOnlyStepError(cache_key)

        return cls(cache_key, ttl, _no_remote, name, model, cache_only=True)


def _is_empty_collection(value: Any) -> bool:
    return value is None or (isinstance(value, Sized) and len(value) == 0)


def _is_missing_entity(value: Any) -> bool:
    return value is None


class FallbackChain:
    """Walks fallback steps sequentially through one orchestrator.

    Args:
        orchestrator: The tier's orchestrator
        empty_collection: Factory for the value returned by an exhausted
            collection chain
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        empty_collection: Callable[[], Any] = list,
    ) -> None:
        self.orchestrator = orchestrator
        self._empty_collection = empty_collection

    async def fetch_collection(
        self,
        steps: Sequence[FallbackStep[Any]],
        *,
        force_refresh: bool = False,
    ) -> ChainResult[Any]:
        """Return the first non-empty collection any step yields.

        Never raises for step failures. When every step fails or is empty
        the result is an empty collection with ``exhausted=True``.
        """
        result, last_error = await self._walk(steps, force_refresh, _is_empty_collection)
        if result is not None:
            return result

        logger.warning(
            "All %d fallback steps exhausted; returning empty collection",
            len(steps),
            extra={
                "operation": "fetch_collection",
                "context": {
                    "steps": [step.label for step in steps],
                    "last_error": str(last_error) if last_error else None,
                },
            },
        )
        return ChainResult(
            value=self._empty_collection(),
            freshness=Freshness.STALE,
            source=DataSource.CACHE,
            step_name=None,
            exhausted=True,
        )

    async def fetch_entity(
        self,
        steps: Sequence[FallbackStep[Any]],
        *,
        force_refresh: bool = False,
    ) -> ChainResult[Any]:
        """Return the first entity any step yields.

        Raises:
            Exception: The last step error, unchanged, when every step failed
                or came back empty and at least one raised
            ChainExhaustedError: When every step came back empty
        """
        result, last_error = await self._walk(steps, force_refresh, _is_missing_entity)
        if result is not None:
            return result

        if last_error is not None:
            raise last_error

        raise ChainExhaustedError(
            "No fallback step produced a value",
            context=ErrorContext(
                operation="fetch_entity",
                additional_data={"steps": ",".join(step.label for step in steps)},
            ),
        )

    async def _walk(
        self,
        steps: Sequence[FallbackStep[Any]],
        force_refresh: bool,
        is_empty: Callable[[Any], bool],
    ) -> tuple[ChainResult[Any] | None, Exception | None]:
        last_error: Exception | None = None

        for step in steps:
            try:
                outcome = await self.orchestrator.fetch(
                    step.cache_key,
                    step.ttl,
                    step.producer,
                    force_refresh=force_refresh and not step.cache_only,
                    model=step.model,
                )
            except Exception as e:  # noqa: BLE001
                logger.info("Fallback step '%s' failed: %s", step.label, e)
                last_error = e
                continue

            if is_empty(outcome.value):
                logger.debug("Fallback step '%s' returned nothing", step.label)
                continue

            return (
                ChainResult(
                    value=outcome.value,
                    freshness=outcome.freshness,
                    source=outcome.source,
                    age=outcome.age,
                    step_name=step.label,
                ),
                last_error,
            )

        return None, last_error
