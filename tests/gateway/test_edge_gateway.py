"""Tests for EdgeGateway."""

from __future__ import annotations

import pytest

from conftest import FakeClock, FakeExtractor, FakeOrigin, make_app
from steamdb_companion.config.models import Settings
from steamdb_companion.gateway import EdgeGateway, WatchlistStore
from steamdb_companion.services.cache import MemoryCacheStore
from steamdb_companion.services.repository import FetchOrchestrator
from steamdb_companion.shared import cache_keys
from steamdb_companion.shared.errors import DomainError, ErrorCode, OriginError, UpstreamError
from steamdb_companion.shared.models import ChartRange, CollectionKind


def outage() -> OriginError:
    return OriginError(ErrorCode.ORIGIN_SERVER_ERROR, "SteamDB upstream error: 503", status_code=503)


@pytest.fixture
def origin() -> FakeOrigin:
    return FakeOrigin()


@pytest.fixture
def gateway(
    memory_store: MemoryCacheStore,
    origin: FakeOrigin,
    fake_extractor: FakeExtractor,
    settings: Settings,
    clock: FakeClock,
) -> EdgeGateway:
    watchlists = WatchlistStore(MemoryCacheStore(clock=clock), clock=clock)
    return EdgeGateway(
        FetchOrchestrator(memory_store, name="edge"),
        origin,
        fake_extractor,
        watchlists,
        settings,
    )


class TestHealth:
    def test_reports_parser_version(self, gateway: EdgeGateway) -> None:
        health = gateway.health()

        assert health.status == "ok"
        assert health.parser_version == "v1"


class TestHome:
    @pytest.mark.asyncio
    async def test_sections_come_from_one_page(self, gateway: EdgeGateway, origin: FakeOrigin) -> None:
        home = await gateway.home()

        assert [app.id for app in home.trending] == [1, 2]
        assert home.top_sellers == home.trending == home.most_played
        assert home.stale is False
        assert origin.calls == [("/", None)]

    @pytest.mark.asyncio
    async def test_sections_are_capped(self, gateway: EdgeGateway, fake_extractor: FakeExtractor) -> None:
        fake_extractor.apps = [make_app(i, f"App {i}") for i in range(1, 31)]

        home = await gateway.home()

        assert len(home.trending) == 20

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, gateway: EdgeGateway, origin: FakeOrigin) -> None:
        await gateway.home()
        await gateway.home()

        assert len(origin.calls) == 1

    @pytest.mark.asyncio
    async def test_outage_serves_last_payload_flagged_stale(
        self, gateway: EdgeGateway, origin: FakeOrigin, clock: FakeClock
    ) -> None:
        """Failure-First: SteamDB down with an expired route record."""
        await gateway.home()
        clock.advance(3600)
        origin.error = outage()

        home = await gateway.home()

        assert home.stale is True
        assert [app.id for app in home.trending] == [1, 2]

    @pytest.mark.asyncio
    async def test_outage_without_record_raises(self, gateway: EdgeGateway, origin: FakeOrigin) -> None:
        origin.error = outage()

        with pytest.raises(UpstreamError) as exc_info:
            await gateway.home()

        assert "503" in exc_info.value.message


class TestSearch:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query_is_rejected(self, gateway: EdgeGateway, origin: FakeOrigin, query: str) -> None:
        with pytest.raises(DomainError) as exc_info:
            await gateway.search(query)

        assert exc_info.value.message == "Missing q query parameter."
        assert origin.calls == []

    @pytest.mark.asyncio
    async def test_page_below_one_is_rejected(self, gateway: EdgeGateway) -> None:
        with pytest.raises(DomainError):
            await gateway.search("portal", page=0)

    @pytest.mark.asyncio
    async def test_query_and_page_are_part_of_the_key(
        self, gateway: EdgeGateway, origin: FakeOrigin, memory_store: MemoryCacheStore
    ) -> None:
        payload = await gateway.search("  portal   2 ", page=2)

        assert payload.page == 2
        assert origin.calls == [("/search/", {"q": "portal 2", "a": "app"})]
        assert await memory_store.keys() == [cache_keys.search_key("portal 2", 2)]

        await gateway.search("portal 2", page=3)
        assert len(origin.calls) == 2


class TestAppRoutes:
    @pytest.mark.asyncio
    async def test_app_overview(self, gateway: EdgeGateway, origin: FakeOrigin) -> None:
        payload = await gateway.app_overview(620)

        assert payload.app.id == 620
        assert origin.calls == [("/app/620/", None)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("app_id", [0, -1])
    async def test_non_positive_app_id_is_rejected(self, gateway: EdgeGateway, app_id: int) -> None:
        with pytest.raises(DomainError):
            await gateway.app_overview(app_id)

    @pytest.mark.asyncio
    async def test_charts_accept_range_names(self, gateway: EdgeGateway, memory_store: MemoryCacheStore) -> None:
        payload = await gateway.app_charts(620, "YEAR")

        assert payload.price_history[0].price == 9.99
        assert await memory_store.keys() == [cache_keys.app_charts_key(620, ChartRange.YEAR)]

    @pytest.mark.asyncio
    async def test_unknown_range_is_rejected(self, gateway: EdgeGateway) -> None:
        with pytest.raises(DomainError) as exc_info:
            await gateway.app_charts(620, "decade")

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR


class TestCollections:
    @pytest.mark.asyncio
    async def test_collection_fetches_its_page(self, gateway: EdgeGateway, origin: FakeOrigin) -> None:
        payload = await gateway.collection("sales")

        assert payload.kind is CollectionKind.SALES
        assert origin.calls == [("/sales/", None)]

    @pytest.mark.asyncio
    async def test_unknown_collection_is_rejected(self, gateway: EdgeGateway) -> None:
        with pytest.raises(DomainError):
            await gateway.collection("nonsense")


class TestWatchlistRoutes:
    @pytest.mark.asyncio
    async def test_round_trip(self, gateway: EdgeGateway) -> None:
        await gateway.update_watchlist("install-1", [620, "730", 620])

        watchlist = await gateway.get_watchlist("install-1")

        assert watchlist.app_ids == [620, 730]
