"""
Network Configuration Constants

Defaults for the SteamDB origin, the edge gateway and the Steam store API.
"""


class NetworkConfig:
    """Defaults shared by every remote client."""

    DEFAULT_TIMEOUT = 20  # seconds, per call
    DEFAULT_RETRY_ATTEMPTS = 2
    DEFAULT_RETRY_DELAY = 0.5  # seconds, doubled per attempt
    DEFAULT_CONCURRENT_REQUESTS = 4

    # Token bucket
    DEFAULT_TOKEN_BUCKET_CAPACITY = 4
    DEFAULT_TOKEN_REFILL_RATE = 2.0
    RATE_LIMIT_POLL_INTERVAL = 0.1

    # State machine
    DEFAULT_ERROR_THRESHOLD = 60.0  # percent
    DEFAULT_ERROR_WINDOW = 300  # seconds
    DEFAULT_MAX_RETRY_AFTER = 300  # seconds
    DEFAULT_429_BACKOFF = 1.0  # seconds, doubled per consecutive 429
    MAX_429_BACKOFF = 60.0
    MIN_REQUESTS_FOR_CIRCUIT = 10
    DEFAULT_CACHE_ONLY_COOLDOWN = 120  # seconds

    # Session
    CONNECTOR_LIMIT = 100
    CONNECTOR_LIMIT_PER_HOST = 10
    KEEPALIVE_TIMEOUT = 30


class OriginConfig:
    """SteamDB origin defaults."""

    BASE_URL = "https://steamdb.info"
    USER_AGENT = "SteamDBCompanion-Worker/1.0 (+https://steamdb.info/)"
    ACCEPT = "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8"

    HOME_PATH = "/"
    SEARCH_PATH = "/search/"
    APP_PATH = "/app/{app_id}/"
    CHARTS_PATH = "/app/{app_id}/charts/"
    TOP_SELLERS_PATH = "/topsellers/global/"
    MOST_PLAYED_PATH = "/charts/"

    HOME_SECTION_SIZE = 20


class GatewayConfig:
    """Edge gateway API defaults."""

    PARSER_VERSION = "v1"
    USER_AGENT = "SteamDBCompanion/1.0"

    HEALTH_PATH = "/v1/health"
    HOME_PATH = "/v1/home"
    SEARCH_PATH = "/v1/search"
    APP_OVERVIEW_PATH = "/v1/apps/{app_id}/overview"
    APP_CHARTS_PATH = "/v1/apps/{app_id}/charts"
    COLLECTION_PATH = "/v1/collections/{kind}"
    WATCHLIST_PATH = "/v1/watchlist/{installation_id}"

    INSTALLATION_ID_MAX_LENGTH = 80


class SteamStoreConfig:
    """Public Steam store API defaults (secondary source)."""

    BASE_URL = "https://store.steampowered.com"
    APP_DETAILS_PATH = "/api/appdetails"
    STORE_SEARCH_PATH = "/api/storesearch/"
    COUNTRY = "us"
    LANGUAGE = "english"
    PRICE_DIVISOR = 100  # prices are reported in cents
