"""Shared data models."""

from .steamdb import (
    AppChartsPayload,
    AppOverviewPayload,
    ChartRange,
    CollectionKind,
    CollectionPayload,
    GatewayApp,
    HealthPayload,
    HomePayload,
    PlayerPoint,
    PricePoint,
    SearchPayload,
    WatchlistPayload,
)

__all__ = [
    "AppChartsPayload",
    "AppOverviewPayload",
    "ChartRange",
    "CollectionKind",
    "CollectionPayload",
    "GatewayApp",
    "HealthPayload",
    "HomePayload",
    "PlayerPoint",
    "PricePoint",
    "SearchPayload",
    "WatchlistPayload",
]
