"""Cache key builders.

Keys are flat strings. Every parameter that distinguishes one request from
another (query text, page, app id, chart range, collection kind) is encoded
into the key, and each tier keeps its own prefix.
"""

from __future__ import annotations

from steamdb_companion.shared.constants import ClientCacheConfig, EdgeCacheConfig
from steamdb_companion.shared.models import ChartRange, CollectionKind


def normalize_query(query: str) -> str:
    """Trim and collapse whitespace so equivalent queries share a key."""
    return " ".join(query.split())


def _route(suffix: str) -> str:
    return f"{EdgeCacheConfig.ROUTE_PREFIX}{suffix}"


def home_key() -> str:
    return _route("home")


def search_key(query: str, page: int = 1) -> str:
    return _route(f"search:{normalize_query(query)}:{page}")


def app_overview_key(app_id: int) -> str:
    return _route(f"app:{app_id}:overview")


def app_charts_key(app_id: int, chart_range: ChartRange) -> str:
    return _route(f"app:{app_id}:charts:{ChartRange(chart_range).value}")


def collection_key(kind: CollectionKind) -> str:
    return _route(f"collection:{CollectionKind(kind).value}")


def watchlist_key(installation_id: str) -> str:
    return f"{EdgeCacheConfig.WATCHLIST_PREFIX}{installation_id}"


def client_key(source: str, *parts: object) -> str:
    """Key for one client-tier fallback step, e.g. ``client:gateway:search:portal:1``."""
    suffix = ":".join(str(part) for part in parts)
    return f"{ClientCacheConfig.CLIENT_PREFIX}{source}:{suffix}"


def legacy_key(name: str, *parts: object) -> str:
    """Key of the last known good result for a client query.

    These keep the names the client has always cached under
    (``trending``, ``app_details_730``, ``price_history_730``).
    """
    if not parts:
        return name
    return "_".join([name, *(str(part) for part in parts)])
