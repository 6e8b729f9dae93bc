"""Client for the edge gateway's JSON API."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from steamdb_companion.shared.constants import GatewayConfig
from steamdb_companion.shared.errors import ErrorCode, create_origin_error
from steamdb_companion.shared.logging import log_operation_error
from steamdb_companion.shared.models import (
    AppChartsPayload,
    AppOverviewPayload,
    ChartRange,
    CollectionKind,
    CollectionPayload,
    HealthPayload,
    HomePayload,
    SearchPayload,
    WatchlistPayload,
)

from .origin_client import OriginClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class GatewayClient:
    """Typed access to the ``/v1`` routes of the edge gateway.

    Every response is validated into its payload model; a body that does
    not fit raises ``OriginError(ORIGIN_INVALID_RESPONSE)``.
    """

    def __init__(self, client: OriginClient) -> None:
        self.client = client

    async def health(self) -> HealthPayload:
        return await self._get(HealthPayload, GatewayConfig.HEALTH_PATH)

    async def home(self) -> HomePayload:
        return await self._get(HomePayload, GatewayConfig.HOME_PATH)

    async def search(self, query: str, page: int = 1) -> SearchPayload:
        return await self._get(SearchPayload, GatewayConfig.SEARCH_PATH, {"q": query, "page": page})

    async def app_overview(self, app_id: int) -> AppOverviewPayload:
        return await self._get(AppOverviewPayload, GatewayConfig.APP_OVERVIEW_PATH.format(app_id=app_id))

    async def app_charts(self, app_id: int, chart_range: ChartRange = ChartRange.MONTH) -> AppChartsPayload:
        return await self._get(
            AppChartsPayload,
            GatewayConfig.APP_CHARTS_PATH.format(app_id=app_id),
            {"range": ChartRange(chart_range).value},
        )

    async def collection(self, kind: CollectionKind) -> CollectionPayload:
        return await self._get(
            CollectionPayload,
            GatewayConfig.COLLECTION_PATH.format(kind=CollectionKind(kind).value),
        )

    async def watchlist(self, installation_id: str) -> WatchlistPayload:
        return await self._get(
            WatchlistPayload,
            GatewayConfig.WATCHLIST_PATH.format(installation_id=installation_id),
        )

    async def update_watchlist(self, installation_id: str, app_ids: list[int]) -> WatchlistPayload:
        path = GatewayConfig.WATCHLIST_PATH.format(installation_id=installation_id)
        raw = await self.client.request_json(path, method="PUT", json_body={"appIDs": list(app_ids)})
        return self._validate(WatchlistPayload, raw, path)

    async def _get(self, model: type[M], path: str, params: dict[str, Any] | None = None) -> M:
        raw = await self.client.fetch_json(path, params=params)
        return self._validate(model, raw, path)

    def _validate(self, model: type[M], raw: Any, path: str) -> M:
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            error = create_origin_error(
                ErrorCode.ORIGIN_INVALID_RESPONSE,
                f"Gateway response for {path} does not match {model.__name__}",
                self.client.url_for(path),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="gateway_response")
            raise error from e
