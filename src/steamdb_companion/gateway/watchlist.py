"""Per-installation watchlists kept by the edge gateway."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from steamdb_companion.services.cache import KeyedCacheStore
from steamdb_companion.shared.cache_keys import watchlist_key
from steamdb_companion.shared.constants import GatewayConfig
from steamdb_companion.shared.errors import create_validation_error
from steamdb_companion.shared.models import WatchlistPayload

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_installation_id(installation_id: str) -> str:
    """Strip everything but ``[A-Za-z0-9_-]`` and cap the length.

    Raises:
        DomainError: If nothing is left after sanitizing
    """
    cleaned = _UNSAFE_ID_CHARS.sub("", installation_id)[: GatewayConfig.INSTALLATION_ID_MAX_LENGTH]
    if not cleaned:
        raise create_validation_error(
            "Installation id is empty after sanitizing",
            field="installation_id",
            operation="sanitize_installation_id",
        )
    return cleaned


def normalize_app_ids(app_ids: Iterable[Any]) -> list[int]:
    """Positive integer ids, de-duplicated, in first-seen order."""
    seen: dict[int, None] = {}
    for raw in app_ids:
        try:
            app_id = int(str(raw).strip())
        except ValueError:
            continue
        if app_id > 0:
            seen.setdefault(app_id, None)
    return list(seen)


class WatchlistStore:
    """Reads and replaces watchlists in a keyed store.

    Watchlists never expire: reads ignore the record's age.
    """

    def __init__(
        self,
        store: KeyedCacheStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self._clock = clock

    async def get(self, installation_id: str) -> WatchlistPayload:
        """The stored watchlist, or an empty one when missing or unreadable."""
        installation_id = sanitize_installation_id(installation_id)
        record = await self.store.inspect(watchlist_key(installation_id))
        if record is not None and record.value is not None:
            try:
                stored = WatchlistPayload.model_validate(record.value)
                return stored.model_copy(update={"installation_id": installation_id})
            except ValidationError as e:
                logger.warning("Watchlist for '%s' is corrupt; serving empty list: %s", installation_id, e.error_count())

        return self._empty(installation_id)

    async def put(self, installation_id: str, app_ids: Iterable[Any]) -> WatchlistPayload:
        """Replace the watchlist and return what was stored."""
        installation_id = sanitize_installation_id(installation_id)
        payload = WatchlistPayload(
            installation_id=installation_id,
            app_ids=normalize_app_ids(app_ids),
            updated_at=self._clock(),
        )
        await self.store.put(watchlist_key(installation_id), payload.to_wire())
        return payload

    def _empty(self, installation_id: str) -> WatchlistPayload:
        return WatchlistPayload(installation_id=installation_id, app_ids=[], updated_at=self._clock())
