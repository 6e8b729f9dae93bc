"""Client-side data source.

Every query the client makes is a fallback chain over its private cache:

    edge gateway -> direct SteamDB scrape -> Steam store API -> last known good

Sources that are not configured (no gateway URL, no extractor, no store
client) are left out of the chain. Each successful live answer is also
written under the query's last-known-good key, which the final
cache-only step serves when everything else fails.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import TypeAdapter

from steamdb_companion.config.models import Settings
from steamdb_companion.services.cache import KeyedCacheStore
from steamdb_companion.services.origin import (
    ContentExtractor,
    GatewayClient,
    OriginClient,
    SteamStoreClient,
)
from steamdb_companion.services.repository import (
    ChainResult,
    DataSource,
    FallbackChain,
    FallbackStep,
    Freshness,
)
from steamdb_companion.shared.cache_keys import client_key, legacy_key, normalize_query
from steamdb_companion.shared.constants import OriginConfig
from steamdb_companion.shared.errors import create_config_error, create_validation_error
from steamdb_companion.shared.models import (
    AppChartsPayload,
    ChartRange,
    CollectionKind,
    GatewayApp,
    PlayerPoint,
    PricePoint,
)

logger = logging.getLogger(__name__)

AppList = list[GatewayApp]

_GATEWAY = "gateway"
_STEAMDB = "steamdb"
_STORE = "store"


class CompanionDataSource:
    """Fallback-chain backed queries for the client tier.

    Args:
        chain: Fallback chain over the client's orchestrator
        store: The client's cache store (for last-known-good writes)
        gateway: Edge gateway client, or None to skip that source
        origin: Origin client bound to SteamDB, used with ``extractor``
        extractor: Parses scraped pages, or None to skip direct scraping
        store_api: Steam store API client, or None to skip that source
        settings: Client TTLs
    """

    def __init__(
        self,
        chain: FallbackChain,
        store: KeyedCacheStore,
        *,
        gateway: GatewayClient | None = None,
        origin: OriginClient | None = None,
        extractor: ContentExtractor | None = None,
        store_api: SteamStoreClient | None = None,
        settings: Settings,
    ) -> None:
        self.chain = chain
        self.store = store
        self.gateway = gateway
        self.origin = origin
        self.extractor = extractor
        self.store_api = store_api
        self._ttl = settings.cache.client_ttl

    @property
    def can_scrape(self) -> bool:
        return self.origin is not None and self.extractor is not None

    # Collections

    async def search_apps(self, query: str, *, force_refresh: bool = False) -> ChainResult[AppList]:
        """Apps matching ``query``. A blank query returns nothing without any call."""
        query = normalize_query(query or "")
        if not query:
            return ChainResult(value=[], freshness=Freshness.FRESH, source=DataSource.CACHE)

        ttl = self._ttl.search
        steps: list[FallbackStep[Any]] = []
        if self.gateway is not None:
            gateway = self.gateway

            async def from_gateway() -> AppList:
                return (await gateway.search(query)).results

            steps.append(FallbackStep(client_key(_GATEWAY, "search", query, 1), ttl, from_gateway, _GATEWAY, AppList))
        if self.can_scrape:

            async def from_steamdb() -> AppList:
                return await self._scrape_apps(OriginConfig.SEARCH_PATH, {"q": query, "a": "app"})

            steps.append(FallbackStep(client_key(_STEAMDB, "search", query), ttl, from_steamdb, _STEAMDB, AppList))
        if self.store_api is not None:
            store_api = self.store_api

            async def from_store() -> AppList:
                return await store_api.search(query)

            steps.append(FallbackStep(client_key(_STORE, "search", query), ttl, from_store, _STORE, AppList))

        return await self._collection(legacy_key("search", query), ttl, steps, AppList, force_refresh)

    async def trending(self, *, force_refresh: bool = False) -> ChainResult[AppList]:
        return await self._home_section("trending", OriginConfig.HOME_PATH, force_refresh)

    async def top_sellers(self, *, force_refresh: bool = False) -> ChainResult[AppList]:
        return await self._home_section("top_sellers", OriginConfig.TOP_SELLERS_PATH, force_refresh)

    async def most_played(self, *, force_refresh: bool = False) -> ChainResult[AppList]:
        return await self._home_section("most_played", OriginConfig.MOST_PLAYED_PATH, force_refresh)

    async def collection(self, kind: CollectionKind | str, *, force_refresh: bool = False) -> ChainResult[AppList]:
        try:
            kind = CollectionKind(kind)
        except ValueError as e:
            raise create_validation_error(
                f"Unknown collection kind: {kind}",
                field="kind",
                operation="collection",
                original_error=e,
            ) from e

        ttl = self._ttl.collection
        steps: list[FallbackStep[Any]] = []
        if self.gateway is not None:
            gateway = self.gateway

            async def from_gateway() -> AppList:
                return (await gateway.collection(kind)).items

            steps.append(FallbackStep(client_key(_GATEWAY, "collection", kind.value), ttl, from_gateway, _GATEWAY, AppList))
        if self.can_scrape:

            async def from_steamdb() -> AppList:
                return await self._scrape_apps(kind.path)

            steps.append(FallbackStep(client_key(_STEAMDB, "collection", kind.value), ttl, from_steamdb, _STEAMDB, AppList))

        return await self._collection(legacy_key("collection", kind.value), ttl, steps, AppList, force_refresh)

    async def price_history(self, app_id: int, *, force_refresh: bool = False) -> ChainResult[list[PricePoint]]:
        """Full price history of ``app_id``; empty when no source has it."""
        return await self._chart_series(
            app_id,
            "price_history",
            self._ttl.price_history,
            lambda charts: charts.price_history,
            list[PricePoint],
            force_refresh,
        )

    async def player_trend(self, app_id: int, *, force_refresh: bool = False) -> ChainResult[list[PlayerPoint]]:
        """Full player count trend of ``app_id``; empty when no source has it."""
        return await self._chart_series(
            app_id,
            "player_trend",
            self._ttl.player_trend,
            lambda charts: charts.player_trend,
            list[PlayerPoint],
            force_refresh,
        )

    # Single entities

    async def app_details(self, app_id: int, *, force_refresh: bool = False) -> ChainResult[GatewayApp]:
        """Details of one app.

        Raises:
            DomainError: If ``app_id`` is not positive
            Exception: The last source's error when every source failed
            ChainExhaustedError: When every source came back empty
        """
        _require_app_id(app_id)
        ttl = self._ttl.details
        model = GatewayApp | None
        steps: list[FallbackStep[Any]] = []
        if self.gateway is not None:
            gateway = self.gateway

            async def from_gateway() -> GatewayApp:
                return (await gateway.app_overview(app_id)).app

            steps.append(FallbackStep(client_key(_GATEWAY, "app", app_id), ttl, from_gateway, _GATEWAY, model))
        if self.can_scrape:

            async def from_steamdb() -> GatewayApp:
                html = await self._fetch_page(OriginConfig.APP_PATH.format(app_id=app_id))
                return self._extractor().parse_app_overview(html, app_id)

            steps.append(FallbackStep(client_key(_STEAMDB, "app", app_id), ttl, from_steamdb, _STEAMDB, model))
        if self.store_api is not None:
            store_api = self.store_api

            async def from_store() -> GatewayApp | None:
                return await store_api.app_details(app_id)

            steps.append(FallbackStep(client_key(_STORE, "app", app_id), ttl, from_store, _STORE, model))

        fallback_key = legacy_key("app_details", app_id)
        steps.append(FallbackStep.cache_only_step(fallback_key, ttl, model=model))

        result = await self.chain.fetch_entity(steps, force_refresh=force_refresh)
        await self._remember(fallback_key, result, model)
        return result

    async def app_charts(
        self,
        app_id: int,
        chart_range: ChartRange | str = ChartRange.MONTH,
        *,
        force_refresh: bool = False,
    ) -> ChainResult[AppChartsPayload]:
        """Price and player charts of one app; raises like ``app_details``."""
        _require_app_id(app_id)
        steps = self._chart_steps(app_id, ChartRange(chart_range), self._ttl.charts)
        return await self.chain.fetch_entity(steps, force_refresh=force_refresh)

    # Helpers

    def _chart_steps(self, app_id: int, chart_range: ChartRange, ttl: float) -> list[FallbackStep[Any]]:
        steps: list[FallbackStep[Any]] = []
        if self.gateway is not None:
            gateway = self.gateway

            async def from_gateway() -> AppChartsPayload:
                return await gateway.app_charts(app_id, chart_range)

            steps.append(
                FallbackStep(
                    client_key(_GATEWAY, "charts", app_id, chart_range.value),
                    ttl,
                    from_gateway,
                    _GATEWAY,
                    AppChartsPayload,
                )
            )
        if self.can_scrape:

            async def from_steamdb() -> AppChartsPayload:
                html = await self._fetch_page(OriginConfig.CHARTS_PATH.format(app_id=app_id))
                return self._extractor().parse_charts(html, app_id)

            # The charts page carries every range.
            steps.append(
                FallbackStep(client_key(_STEAMDB, "charts", app_id), ttl, from_steamdb, _STEAMDB, AppChartsPayload)
            )
        return steps

    async def _chart_series(
        self,
        app_id: int,
        name: str,
        ttl: float,
        select: Callable[[AppChartsPayload], list[Any]],
        model: Any,
        force_refresh: bool,
    ) -> ChainResult[Any]:
        _require_app_id(app_id)
        steps = [
            FallbackStep(
                client_key(step.name, name, app_id),
                ttl,
                _selecting(step.producer, select),
                step.name,
                model,
            )
            for step in self._chart_steps(app_id, ChartRange.ALL, ttl)
        ]
        return await self._collection(legacy_key(name, app_id), ttl, steps, model, force_refresh)

    async def _home_section(self, section: str, page_path: str, force_refresh: bool) -> ChainResult[AppList]:
        ttl = self._ttl.trending
        steps: list[FallbackStep[Any]] = []
        if self.gateway is not None:
            gateway = self.gateway

            async def from_gateway() -> AppList:
                return getattr(await gateway.home(), section)

            steps.append(FallbackStep(client_key(_GATEWAY, "home", section), ttl, from_gateway, _GATEWAY, AppList))
        if self.can_scrape:

            async def from_steamdb() -> AppList:
                apps = await self._scrape_apps(page_path)
                return apps[: OriginConfig.HOME_SECTION_SIZE]

            steps.append(FallbackStep(client_key(_STEAMDB, "home", section), ttl, from_steamdb, _STEAMDB, AppList))

        return await self._collection(legacy_key(section), ttl, steps, AppList, force_refresh)

    async def _collection(
        self,
        fallback_key: str,
        ttl: float,
        steps: list[FallbackStep[Any]],
        model: Any,
        force_refresh: bool,
    ) -> ChainResult[Any]:
        steps = [*steps, FallbackStep.cache_only_step(fallback_key, ttl, model=model)]
        result = await self.chain.fetch_collection(steps, force_refresh=force_refresh)
        await self._remember(fallback_key, result, model)
        return result

    async def _remember(self, fallback_key: str, result: ChainResult[Any], model: Any) -> None:
        """Keep a live answer as the query's last known good value."""
        if result.exhausted or result.source is not DataSource.REMOTE:
            return
        value = TypeAdapter(model).dump_python(result.value, mode="json")
        await self.store.put(fallback_key, value)

    async def _scrape_apps(self, path: str, params: dict[str, Any] | None = None) -> AppList:
        html = await self._fetch_page(path, params)
        return self._extractor().parse_apps(html)

    async def _fetch_page(self, path: str, params: dict[str, Any] | None = None) -> str:
        if self.origin is None:
            raise create_config_error("No SteamDB origin client is configured", operation="fetch_page")
        return await self.origin.fetch_text(path, params=params)

    def _extractor(self) -> ContentExtractor:
        if self.extractor is None:
            raise create_config_error("No content extractor is configured", operation="parse_page")
        return self.extractor


def _require_app_id(app_id: int) -> None:
    if app_id <= 0:
        raise create_validation_error(
            f"App id must be positive, got: {app_id}",
            field="app_id",
            operation="client_query",
        )


def _selecting(
    producer: Callable[[], Awaitable[AppChartsPayload]],
    select: Callable[[AppChartsPayload], list[Any]],
) -> Callable[[], Awaitable[list[Any]]]:
    async def produce() -> list[Any]:
        return select(await producer())

    return produce
