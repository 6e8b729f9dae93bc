"""
Cache Configuration Constants

TTLs, key prefixes and file names for the cache tiers.
"""

# Base time units (seconds)
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE
BASE_DAY = 24 * BASE_HOUR


class BaseCacheConfig:
    """Base cache configuration shared by both tiers."""

    # Backends
    BACKEND_SQLITE = "sqlite"
    BACKEND_JSON = "json"
    BACKEND_MEMORY = "memory"
    BACKENDS = (BACKEND_SQLITE, BACKEND_JSON, BACKEND_MEMORY)

    SCHEMA_VERSION = 1
    CACHE_FILE_SUFFIX = ".json"


class EdgeCacheConfig(BaseCacheConfig):
    """Route cache TTLs for the shared edge gateway."""

    HOME_TTL = 5 * BASE_MINUTE
    SEARCH_TTL = 3 * BASE_MINUTE
    APP_TTL = 5 * BASE_MINUTE
    CHARTS_TTL = 5 * BASE_MINUTE
    COLLECTION_TTL = 5 * BASE_MINUTE
    WATCHLIST_TTL = BASE_MINUTE

    ROUTE_PREFIX = "route:"
    WATCHLIST_PREFIX = "watchlist:"

    DEFAULT_DB_FILE = "edge_cache.db"
    DEFAULT_WATCHLIST_DB_FILE = "watchlists.db"


class ClientCacheConfig(BaseCacheConfig):
    """TTLs for the private cache embedded in each client."""

    TRENDING_TTL = 30 * BASE_MINUTE
    DETAILS_TTL = BASE_HOUR
    PRICE_HISTORY_TTL = 2 * BASE_HOUR
    PLAYER_TREND_TTL = 30 * BASE_MINUTE
    CHARTS_TTL = 30 * BASE_MINUTE
    SEARCH_TTL = 3 * BASE_MINUTE
    COLLECTION_TTL = 5 * BASE_MINUTE

    CLIENT_PREFIX = "client:"

    DEFAULT_DIRECTORY = "client_cache"
