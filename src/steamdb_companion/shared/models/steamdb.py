"""SteamDB domain models.

Wire models shared by the edge gateway, the gateway client and the client
data source. Field names are snake_case in Python and camelCase on the
wire; both spellings are accepted when validating.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChartRange(str, Enum):
    """Time range of an app's chart data."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class CollectionKind(str, Enum):
    """Ranked lists SteamDB publishes, keyed by their gateway name."""

    TOP_RATED = "top-rated"
    TOP_SELLERS_GLOBAL = "topsellers-global"
    TOP_SELLERS_WEEKLY = "topsellers-weekly"
    MOST_FOLLOWED = "mostfollowed"
    MOST_WISHED = "mostwished"
    WISHLISTS = "wishlists"
    DAILY_ACTIVE_USERS = "dailyactiveusers"
    SALES = "sales"
    CHARTS = "charts"
    CALENDAR = "calendar"
    PRICE_CHANGES = "pricechanges"
    UPCOMING = "upcoming"
    FREE_PACKAGES = "freepackages"
    BUNDLES = "bundles"

    @property
    def path(self) -> str:
        """Path of the SteamDB page listing this collection."""
        return _COLLECTION_PATHS[self]


_COLLECTION_PATHS: dict[CollectionKind, str] = {
    CollectionKind.TOP_RATED: "/top-rated/",
    CollectionKind.TOP_SELLERS_GLOBAL: "/topsellers/global/",
    CollectionKind.TOP_SELLERS_WEEKLY: "/topsellers/weekly/",
    CollectionKind.MOST_FOLLOWED: "/mostfollowed/",
    CollectionKind.MOST_WISHED: "/mostwished/",
    CollectionKind.WISHLISTS: "/wishlists/",
    CollectionKind.DAILY_ACTIVE_USERS: "/dailyactiveusers/",
    CollectionKind.SALES: "/sales/",
    CollectionKind.CHARTS: "/charts/",
    CollectionKind.CALENDAR: "/calendar/",
    CollectionKind.PRICE_CHANGES: "/pricechanges/",
    CollectionKind.UPCOMING: "/upcoming/",
    CollectionKind.FREE_PACKAGES: "/freepackages/",
    CollectionKind.BUNDLES: "/bundles/",
}


class GatewayModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump with camelCase keys, as the gateway sends it."""
        return self.model_dump(mode="json", by_alias=True)


class StalePayload(GatewayModel):
    """Payload that can be flagged as served from a stale cache record."""

    stale: bool = False

    def as_stale(self):
        return self.model_copy(update={"stale": True})


class GatewayApp(GatewayModel):
    """One Steam app as listed by SteamDB."""

    id: int = Field(..., gt=0)
    name: str
    type: str = "game"
    current_price: float | None = None
    currency: str | None = None
    discount_percent: int | None = None
    initial_price: float | None = None
    platforms: list[str] = Field(default_factory=list)
    developer: str | None = None
    publisher: str | None = None
    current_players: int | None = None
    peak_24h: int | None = Field(default=None, alias="peak24h")
    all_time_peak: int | None = None


class HomePayload(StalePayload):
    trending: list[GatewayApp] = Field(default_factory=list)
    top_sellers: list[GatewayApp] = Field(default_factory=list)
    most_played: list[GatewayApp] = Field(default_factory=list)


class SearchPayload(StalePayload):
    results: list[GatewayApp] = Field(default_factory=list)
    page: int = 1
    total: int | None = None


class AppOverviewPayload(StalePayload):
    app: GatewayApp


class PricePoint(GatewayModel):
    date: datetime
    price: float
    discount: int | None = None


class PlayerPoint(GatewayModel):
    date: datetime
    players: int


class AppChartsPayload(StalePayload):
    app_id: int = Field(..., alias="appID", gt=0)
    currency: str | None = None
    price_history: list[PricePoint] = Field(default_factory=list)
    player_trend: list[PlayerPoint] = Field(default_factory=list)


class CollectionPayload(StalePayload):
    kind: CollectionKind
    items: list[GatewayApp] = Field(default_factory=list)


class WatchlistPayload(GatewayModel):
    installation_id: str = Field(..., alias="installationID")
    app_ids: list[int] = Field(default_factory=list, alias="appIDs")
    updated_at: datetime


class HealthPayload(GatewayModel):
    status: str = "ok"
    parser_version: str
    timestamp: datetime
