"""Tests for WatchlistStore and its input normalization."""

from __future__ import annotations

import pytest

from conftest import FakeClock
from steamdb_companion.gateway import WatchlistStore, normalize_app_ids, sanitize_installation_id
from steamdb_companion.services.cache import MemoryCacheStore
from steamdb_companion.shared.cache_keys import watchlist_key
from steamdb_companion.shared.errors import DomainError


@pytest.fixture
def watchlists(memory_store: MemoryCacheStore, clock: FakeClock) -> WatchlistStore:
    return WatchlistStore(memory_store, clock=clock)


class TestSanitizeInstallationId:
    def test_strips_unsafe_characters(self) -> None:
        assert sanitize_installation_id("abc/../def?x=1") == "abcdefx1"
        assert sanitize_installation_id("A_b-9") == "A_b-9"

    def test_caps_length(self) -> None:
        assert len(sanitize_installation_id("a" * 200)) == 80

    def test_nothing_left_is_rejected(self) -> None:
        """Failure-First: an id made only of unsafe characters."""
        with pytest.raises(DomainError):
            sanitize_installation_id("../!!")


class TestNormalizeAppIds:
    def test_keeps_positive_ints_in_first_seen_order(self) -> None:
        assert normalize_app_ids([730, "620", 730, -1, 0, "abc", None, " 440 "]) == [730, 620, 440]

    def test_empty(self) -> None:
        assert normalize_app_ids([]) == []


class TestWatchlistStore:
    @pytest.mark.asyncio
    async def test_unknown_installation_gets_empty_list(self, watchlists: WatchlistStore, clock: FakeClock) -> None:
        payload = await watchlists.get("new-install")

        assert payload.installation_id == "new-install"
        assert payload.app_ids == []
        assert payload.updated_at == clock.now

    @pytest.mark.asyncio
    async def test_put_replaces_and_never_expires(self, watchlists: WatchlistStore, clock: FakeClock) -> None:
        await watchlists.put("abc", [1, 2])
        await watchlists.put("abc", [3])
        clock.advance(365 * 24 * 3600)

        payload = await watchlists.get("abc")

        assert payload.app_ids == [3]

    @pytest.mark.asyncio
    async def test_stored_in_wire_form(self, watchlists: WatchlistStore, memory_store: MemoryCacheStore) -> None:
        await watchlists.put("abc", [620])

        stored = await memory_store.get(watchlist_key("abc"), 0)

        assert stored["appIDs"] == [620]
        assert stored["installationID"] == "abc"

    @pytest.mark.asyncio
    async def test_corrupt_record_reads_as_empty(self, watchlists: WatchlistStore, memory_store: MemoryCacheStore) -> None:
        await memory_store.put(watchlist_key("abc"), {"appIDs": "not-a-list"})

        payload = await watchlists.get("abc")

        assert payload.app_ids == []

    @pytest.mark.asyncio
    async def test_ids_are_sanitized_consistently(self, watchlists: WatchlistStore) -> None:
        await watchlists.put("abc/def", [1])

        assert (await watchlists.get("abcdef")).app_ids == [1]
