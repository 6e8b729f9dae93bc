"""Cache configuration model.

Backend selection and per-route TTLs for both tiers.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from steamdb_companion.shared.constants import (
    BaseCacheConfig,
    ClientCacheConfig,
    EdgeCacheConfig,
)


class EdgeTTLSettings(BaseModel):
    """Route TTLs (seconds) used by the edge gateway."""

    home: int = Field(default=EdgeCacheConfig.HOME_TTL, ge=0)
    search: int = Field(default=EdgeCacheConfig.SEARCH_TTL, ge=0)
    app: int = Field(default=EdgeCacheConfig.APP_TTL, ge=0)
    charts: int = Field(default=EdgeCacheConfig.CHARTS_TTL, ge=0)
    collection: int = Field(default=EdgeCacheConfig.COLLECTION_TTL, ge=0)
    watchlist: int = Field(default=EdgeCacheConfig.WATCHLIST_TTL, ge=0)


class ClientTTLSettings(BaseModel):
    """TTLs (seconds) used by the client's own fallback chains."""

    trending: int = Field(default=ClientCacheConfig.TRENDING_TTL, ge=0)
    details: int = Field(default=ClientCacheConfig.DETAILS_TTL, ge=0)
    price_history: int = Field(default=ClientCacheConfig.PRICE_HISTORY_TTL, ge=0)
    player_trend: int = Field(default=ClientCacheConfig.PLAYER_TREND_TTL, ge=0)
    charts: int = Field(default=ClientCacheConfig.CHARTS_TTL, ge=0)
    search: int = Field(default=ClientCacheConfig.SEARCH_TTL, ge=0)
    collection: int = Field(default=ClientCacheConfig.COLLECTION_TTL, ge=0)


class CacheSettings(BaseModel):
    """Cache configuration.

    Paths are relative to ``app.state_dir`` unless absolute.
    """

    edge_backend: str = Field(
        default=BaseCacheConfig.BACKEND_SQLITE,
        description="Edge route cache backend (sqlite, json, memory)",
    )
    client_backend: str = Field(
        default=BaseCacheConfig.BACKEND_JSON,
        description="Client cache backend (sqlite, json, memory)",
    )
    edge_path: Path = Field(
        default=Path(EdgeCacheConfig.DEFAULT_DB_FILE),
        description="Edge route cache location",
    )
    watchlist_path: Path = Field(
        default=Path(EdgeCacheConfig.DEFAULT_WATCHLIST_DB_FILE),
        description="Edge watchlist store location",
    )
    client_path: Path = Field(
        default=Path(ClientCacheConfig.DEFAULT_DIRECTORY),
        description="Client cache location",
    )
    edge_ttl: EdgeTTLSettings = Field(default_factory=EdgeTTLSettings)
    client_ttl: ClientTTLSettings = Field(default_factory=ClientTTLSettings)

    @field_validator("edge_backend", "client_backend")
    @classmethod
    def validate_backend(cls, value: str) -> str:
        lower = value.lower()
        if lower not in BaseCacheConfig.BACKENDS:
            msg = f"Unknown cache backend: {value}. Must be one of {BaseCacheConfig.BACKENDS}"
            raise ValueError(msg)
        return lower


__all__ = ["CacheSettings", "ClientTTLSettings", "EdgeTTLSettings"]
