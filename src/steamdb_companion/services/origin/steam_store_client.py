"""Public Steam store API client.

Secondary source for the client's fallback chains: when neither the edge
gateway nor a direct SteamDB scrape answers, basic app details and search
results can still come from ``store.steampowered.com``.
"""

from __future__ import annotations

import logging
from typing import Any

from steamdb_companion.shared.constants import SteamStoreConfig
from steamdb_companion.shared.errors import ErrorCode, create_origin_error
from steamdb_companion.shared.models import GatewayApp

from .origin_client import OriginClient

logger = logging.getLogger(__name__)

_PLATFORMS = ("windows", "mac", "linux")


def _price(cents: Any) -> float | None:
    if cents is None:
        return None
    try:
        return float(cents) / SteamStoreConfig.PRICE_DIVISOR
    except (TypeError, ValueError):
        return None


def _platforms(raw: Any) -> list[str]:
    if not isinstance(raw, dict):
        return []
    return [name for name in _PLATFORMS if raw.get(name)]


def _first(values: Any) -> str | None:
    if isinstance(values, list) and values:
        return str(values[0])
    return None


class SteamStoreClient:
    """Reads app details and search results from the Steam store API.

    Args:
        client: Origin client bound to the store's base URL
        country: Store country code (sets the price currency)
        language: Store language for names and descriptions
    """

    def __init__(
        self,
        client: OriginClient,
        country: str = SteamStoreConfig.COUNTRY,
        language: str = SteamStoreConfig.LANGUAGE,
    ) -> None:
        self.client = client
        self.country = country
        self.language = language

    async def app_details(self, app_id: int) -> GatewayApp | None:
        """Details for ``app_id``, or None when the store does not know it.

        Raises:
            OriginError: On transport failures or a malformed response
        """
        payload = await self.client.fetch_json(
            SteamStoreConfig.APP_DETAILS_PATH,
            params={"appids": app_id, "cc": self.country, "l": self.language},
        )
        if not isinstance(payload, dict):
            raise create_origin_error(
                ErrorCode.ORIGIN_INVALID_RESPONSE,
                "Steam store appdetails response is not an object",
                self.client.url_for(SteamStoreConfig.APP_DETAILS_PATH),
            )

        entry = payload.get(str(app_id)) or {}
        if not entry.get("success") or not isinstance(entry.get("data"), dict):
            logger.debug("Steam store has no details for app %d", app_id)
            return None

        return self._app_from_details(app_id, entry["data"])

    async def search(self, term: str) -> list[GatewayApp]:
        """Store search results for ``term``."""
        payload = await self.client.fetch_json(
            SteamStoreConfig.STORE_SEARCH_PATH,
            params={"term": term, "cc": self.country, "l": self.language},
        )
        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []

        apps: list[GatewayApp] = []
        for item in items:
            app = self._app_from_search_item(item)
            if app is not None:
                apps.append(app)
        return apps

    @staticmethod
    def _app_from_details(app_id: int, data: dict[str, Any]) -> GatewayApp:
        price = data.get("price_overview") or {}
        return GatewayApp(
            id=app_id,
            name=str(data.get("name") or f"App {app_id}"),
            type=str(data.get("type") or "game"),
            current_price=_price(price.get("final")),
            initial_price=_price(price.get("initial")),
            currency=price.get("currency"),
            discount_percent=price.get("discount_percent"),
            platforms=_platforms(data.get("platforms")),
            developer=_first(data.get("developers")),
            publisher=_first(data.get("publishers")),
        )

    @staticmethod
    def _app_from_search_item(item: Any) -> GatewayApp | None:
        if not isinstance(item, dict):
            return None
        try:
            app_id = int(item.get("id", 0))
        except (TypeError, ValueError):
            return None
        if app_id <= 0 or not item.get("name"):
            return None

        price = item.get("price") or {}
        initial = _price(price.get("initial"))
        final = _price(price.get("final"))
        discount = None
        if initial and final is not None and final < initial:
            discount = round((1 - final / initial) * 100)

        return GatewayApp(
            id=app_id,
            name=str(item["name"]),
            type=str(item.get("type") or "game"),
            current_price=final,
            initial_price=initial,
            currency=price.get("currency"),
            discount_percent=discount,
            platforms=_platforms(item.get("platforms")),
        )
