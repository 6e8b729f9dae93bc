"""Edge gateway operations.

The shared process in front of every client: it scrapes SteamDB through
one rate-limited origin client, caches each route's payload, and serves
the last good payload (flagged ``stale``) when SteamDB is unavailable.
HTTP routing is left to whatever web layer hosts these operations.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, TypeVar

from steamdb_companion.config.models import Settings
from steamdb_companion.services.origin import ContentExtractor, OriginClient
from steamdb_companion.services.repository import FetchOrchestrator, FreshnessResult
from steamdb_companion.shared import cache_keys
from steamdb_companion.shared.constants import OriginConfig
from steamdb_companion.shared.errors import create_validation_error
from steamdb_companion.shared.models import (
    AppChartsPayload,
    AppOverviewPayload,
    ChartRange,
    CollectionKind,
    CollectionPayload,
    HealthPayload,
    HomePayload,
    SearchPayload,
    WatchlistPayload,
)

from .watchlist import WatchlistStore

logger = logging.getLogger(__name__)

P = TypeVar("P", HomePayload, SearchPayload, AppOverviewPayload, AppChartsPayload, CollectionPayload)


def _flag_stale(result: FreshnessResult[P]) -> P:
    if result.is_stale:
        return result.value.as_stale()
    return result.value


def _require_app_id(app_id: int, operation: str) -> int:
    if app_id <= 0:
        raise create_validation_error(
            f"App id must be positive, got: {app_id}",
            field="app_id",
            operation=operation,
        )
    return app_id


def _parse_enum(enum_cls: Any, value: Any, field: str, operation: str) -> Any:
    try:
        return enum_cls(value.lower() if isinstance(value, str) else value)
    except ValueError as e:
        raise create_validation_error(
            f"Unknown {field}: {value}",
            field=field,
            operation=operation,
            original_error=e,
        ) from e


class EdgeGateway:
    """Route payloads for the ``/v1`` API, served through the route cache.

    Args:
        orchestrator: The edge tier's orchestrator over the route cache
        origin: Origin client bound to SteamDB
        extractor: Turns SteamDB pages into typed records
        watchlists: Per-installation watchlist store
        settings: Route TTLs and parser version
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        origin: OriginClient,
        extractor: ContentExtractor,
        watchlists: WatchlistStore,
        settings: Settings,
    ) -> None:
        self.orchestrator = orchestrator
        self.origin = origin
        self.extractor = extractor
        self.watchlists = watchlists
        self.settings = settings
        self._ttl = settings.cache.edge_ttl

    def health(self) -> HealthPayload:
        return HealthPayload(
            status="ok",
            parser_version=self.settings.gateway.parser_version,
            timestamp=datetime.now(timezone.utc),
        )

    async def home(self, *, force_refresh: bool = False) -> HomePayload:
        async def produce() -> HomePayload:
            html = await self.origin.fetch_text(OriginConfig.HOME_PATH)
            apps = self.extractor.parse_apps(html)[: OriginConfig.HOME_SECTION_SIZE]
            return HomePayload(trending=apps, top_sellers=apps, most_played=apps)

        result = await self.orchestrator.fetch(
            cache_keys.home_key(),
            self._ttl.home,
            produce,
            force_refresh=force_refresh,
            model=HomePayload,
        )
        return _flag_stale(result)

    async def search(self, query: str, page: int = 1, *, force_refresh: bool = False) -> SearchPayload:
        """SteamDB app search.

        Raises:
            DomainError: If ``query`` is blank or ``page`` is below 1
        """
        query = cache_keys.normalize_query(query or "")
        if not query:
            raise create_validation_error("Missing q query parameter.", field="q", operation="search")
        if page < 1:
            raise create_validation_error(f"Page must be 1 or more, got: {page}", field="page", operation="search")

        async def produce() -> SearchPayload:
            html = await self.origin.fetch_text(OriginConfig.SEARCH_PATH, params={"q": query, "a": "app"})
            return SearchPayload(results=self.extractor.parse_apps(html), page=page, total=None)

        result = await self.orchestrator.fetch(
            cache_keys.search_key(query, page),
            self._ttl.search,
            produce,
            force_refresh=force_refresh,
            model=SearchPayload,
        )
        return _flag_stale(result)

    async def app_overview(self, app_id: int, *, force_refresh: bool = False) -> AppOverviewPayload:
        app_id = _require_app_id(app_id, "app_overview")

        async def produce() -> AppOverviewPayload:
            html = await self.origin.fetch_text(OriginConfig.APP_PATH.format(app_id=app_id))
            return AppOverviewPayload(app=self.extractor.parse_app_overview(html, app_id))

        result = await self.orchestrator.fetch(
            cache_keys.app_overview_key(app_id),
            self._ttl.app,
            produce,
            force_refresh=force_refresh,
            model=AppOverviewPayload,
        )
        return _flag_stale(result)

    async def app_charts(
        self,
        app_id: int,
        chart_range: ChartRange | str = ChartRange.MONTH,
        *,
        force_refresh: bool = False,
    ) -> AppChartsPayload:
        app_id = _require_app_id(app_id, "app_charts")
        chart_range = _parse_enum(ChartRange, chart_range, "range", "app_charts")

        async def produce() -> AppChartsPayload:
            html = await self.origin.fetch_text(OriginConfig.CHARTS_PATH.format(app_id=app_id))
            return self.extractor.parse_charts(html, app_id)

        result = await self.orchestrator.fetch(
            cache_keys.app_charts_key(app_id, chart_range),
            self._ttl.charts,
            produce,
            force_refresh=force_refresh,
            model=AppChartsPayload,
        )
        return _flag_stale(result)

    async def collection(self, kind: CollectionKind | str, *, force_refresh: bool = False) -> CollectionPayload:
        """One of SteamDB's ranked lists.

        Raises:
            DomainError: If ``kind`` is not a known collection
        """
        kind = _parse_enum(CollectionKind, kind, "collection kind", "collection")

        async def produce() -> CollectionPayload:
            html = await self.origin.fetch_text(kind.path)
            return CollectionPayload(kind=kind, items=self.extractor.parse_apps(html))

        result = await self.orchestrator.fetch(
            cache_keys.collection_key(kind),
            self._ttl.collection,
            produce,
            force_refresh=force_refresh,
            model=CollectionPayload,
        )
        return _flag_stale(result)

    async def get_watchlist(self, installation_id: str) -> WatchlistPayload:
        return await self.watchlists.get(installation_id)

    async def update_watchlist(self, installation_id: str, app_ids: list[Any]) -> WatchlistPayload:
        return await self.watchlists.put(installation_id, app_ids)
