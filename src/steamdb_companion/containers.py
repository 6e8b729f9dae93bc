"""Dependency Injection containers for SteamDB Companion.

The same cache/orchestrator library runs in two tiers, each wired by its
own container:

- ``EdgeContainer``: the shared gateway. SQLite route cache, one origin
  client for SteamDB, watchlist store.
- ``ClientContainer``: a single client. JSON file cache, fallback chains
  over the gateway, SteamDB and the Steam store API, change alerts.

Nothing is shared between containers; two containers built in one
process hold independent stores and clients.

Example:
    >>> container = EdgeContainer(extractor=providers.Object(my_extractor))
    >>> gateway = container.gateway()
    >>> payload = await gateway.home()
"""

from __future__ import annotations

from dependency_injector import containers, providers

from steamdb_companion.client import CompanionDataSource
from steamdb_companion.config.loader import load_settings
from steamdb_companion.config.models import RemoteSettings, Settings
from steamdb_companion.gateway import EdgeGateway, WatchlistStore
from steamdb_companion.services.alerts import AlertEngine, AlertStateStore, SnapshotDiffEngine
from steamdb_companion.services.cache import create_cache_store
from steamdb_companion.services.origin import (
    AsyncSessionManager,
    GatewayClient,
    OriginClient,
    RateLimitStateMachine,
    SteamStoreClient,
    TokenBucketRateLimiter,
)
from steamdb_companion.services.repository import FallbackChain, FetchOrchestrator


def build_origin_client(remote: RemoteSettings, base_url: str, user_agent: str, name: str) -> OriginClient:
    """An origin client with its own session, token bucket and state machine."""
    return OriginClient(
        AsyncSessionManager(user_agent=user_agent, timeout=remote.timeout),
        base_url,
        rate_limiter=TokenBucketRateLimiter(
            capacity=remote.rate_limit_burst,
            refill_rate=remote.rate_limit_rps,
        ),
        state_machine=RateLimitStateMachine(),
        timeout=remote.timeout,
        retry_attempts=remote.retry_attempts,
        retry_delay=remote.retry_delay,
        concurrent_requests=remote.concurrent_requests,
        name=name,
    )


def _gateway_client(settings: Settings) -> GatewayClient | None:
    gateway = settings.gateway
    if not gateway.base_url:
        return None
    return GatewayClient(build_origin_client(gateway, gateway.base_url, gateway.user_agent, "gateway"))


def _steam_store_client(settings: Settings) -> SteamStoreClient:
    steam_api = settings.steam_api
    client = build_origin_client(steam_api, steam_api.base_url, steam_api.user_agent, "steam-store")
    return SteamStoreClient(client, country=steam_api.country, language=steam_api.language)


class EdgeContainer(containers.DeclarativeContainer):
    """Services of the edge gateway process."""

    settings = providers.Singleton(load_settings)

    # Supplied by the host; turns SteamDB pages into records
    extractor = providers.Dependency()

    route_store = providers.Singleton(
        create_cache_store,
        backend=providers.Callable(lambda s: s.cache.edge_backend, settings),
        location=providers.Callable(lambda s: s.resolve_path(s.cache.edge_path), settings),
    )

    watchlist_backing_store = providers.Singleton(
        create_cache_store,
        backend=providers.Callable(lambda s: s.cache.edge_backend, settings),
        location=providers.Callable(lambda s: s.resolve_path(s.cache.watchlist_path), settings),
    )

    orchestrator = providers.Singleton(FetchOrchestrator, store=route_store, name="edge")

    # Rate limiting components
    rate_limiter = providers.Singleton(
        TokenBucketRateLimiter,
        capacity=providers.Callable(lambda s: s.origin.rate_limit_burst, settings),
        refill_rate=providers.Callable(lambda s: s.origin.rate_limit_rps, settings),
    )

    state_machine = providers.Singleton(RateLimitStateMachine)

    session_manager = providers.Singleton(
        AsyncSessionManager,
        user_agent=providers.Callable(lambda s: s.origin.user_agent, settings),
        timeout=providers.Callable(lambda s: s.origin.timeout, settings),
    )

    origin_client = providers.Singleton(
        OriginClient,
        session_manager=session_manager,
        base_url=providers.Callable(lambda s: s.origin.base_url, settings),
        rate_limiter=rate_limiter,
        state_machine=state_machine,
        timeout=providers.Callable(lambda s: s.origin.timeout, settings),
        retry_attempts=providers.Callable(lambda s: s.origin.retry_attempts, settings),
        retry_delay=providers.Callable(lambda s: s.origin.retry_delay, settings),
        concurrent_requests=providers.Callable(lambda s: s.origin.concurrent_requests, settings),
        name="steamdb",
    )

    watchlists = providers.Singleton(WatchlistStore, store=watchlist_backing_store)

    gateway = providers.Singleton(
        EdgeGateway,
        orchestrator=orchestrator,
        origin=origin_client,
        extractor=extractor,
        watchlists=watchlists,
        settings=settings,
    )


class ClientContainer(containers.DeclarativeContainer):
    """Services of one client installation."""

    settings = providers.Singleton(load_settings)

    # Optional; without one the client never scrapes SteamDB directly
    extractor = providers.Object(None)

    client_store = providers.Singleton(
        create_cache_store,
        backend=providers.Callable(lambda s: s.cache.client_backend, settings),
        location=providers.Callable(lambda s: s.resolve_path(s.cache.client_path), settings),
    )

    orchestrator = providers.Singleton(FetchOrchestrator, store=client_store, name="client")

    chain = providers.Singleton(FallbackChain, orchestrator=orchestrator)

    origin_client = providers.Singleton(
        build_origin_client,
        remote=providers.Callable(lambda s: s.origin, settings),
        base_url=providers.Callable(lambda s: s.origin.base_url, settings),
        user_agent=providers.Callable(lambda s: s.origin.user_agent, settings),
        name="steamdb",
    )

    gateway_client = providers.Singleton(_gateway_client, settings=settings)

    store_api = providers.Singleton(_steam_store_client, settings=settings)

    data_source = providers.Singleton(
        CompanionDataSource,
        chain=chain,
        store=client_store,
        gateway=gateway_client,
        origin=origin_client,
        extractor=extractor,
        store_api=store_api,
        settings=settings,
    )

    # Change alerts
    diff_engine = providers.Singleton(
        SnapshotDiffEngine,
        price_change_threshold=providers.Callable(lambda s: s.alerts.price_change_threshold, settings),
        metric_threshold=providers.Callable(lambda s: s.alerts.metric_threshold, settings),
    )

    alert_state_store = providers.Singleton(
        AlertStateStore,
        state_dir=providers.Callable(lambda s: s.resolve_path(s.alerts.state_path), settings),
    )

    alert_engine = providers.Singleton(
        AlertEngine,
        diff_engine=diff_engine,
        state_store=alert_state_store,
        history_limit=providers.Callable(lambda s: s.alerts.history_limit, settings),
    )
