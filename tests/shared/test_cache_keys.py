"""Tests for cache key builders."""

import pytest

from steamdb_companion.shared import cache_keys
from steamdb_companion.shared.models import ChartRange, CollectionKind


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("portal", "portal"), ("  portal   2 ", "portal 2"), ("\tportal\n", "portal"), ("   ", "")],
)
def test_normalize_query(raw: str, expected: str) -> None:
    assert cache_keys.normalize_query(raw) == expected


def test_route_keys_encode_every_parameter() -> None:
    assert cache_keys.home_key() == "route:home"
    assert cache_keys.search_key("portal  2", 3) == "route:search:portal 2:3"
    assert cache_keys.app_overview_key(620) == "route:app:620:overview"
    assert cache_keys.app_charts_key(620, ChartRange.WEEK) == "route:app:620:charts:week"
    assert cache_keys.collection_key(CollectionKind.MOST_WISHED) == "route:collection:mostwished"
    assert cache_keys.watchlist_key("abc") == "watchlist:abc"


def test_distinct_requests_get_distinct_keys() -> None:
    keys = {
        cache_keys.search_key("portal", 1),
        cache_keys.search_key("portal", 2),
        cache_keys.search_key("portal 2", 1),
        cache_keys.app_charts_key(620, ChartRange.DAY),
        cache_keys.app_charts_key(620, ChartRange.ALL),
    }

    assert len(keys) == 5


def test_client_and_legacy_keys() -> None:
    assert cache_keys.client_key("gateway", "search", "portal", 1) == "client:gateway:search:portal:1"
    assert cache_keys.legacy_key("trending") == "trending"
    assert cache_keys.legacy_key("app_details", 730) == "app_details_730"
