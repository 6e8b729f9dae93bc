"""Content extractor interface.

Turning scraped SteamDB markup into typed records lives outside this
package. Both tiers call an extractor through producer closures and only
rely on this protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from steamdb_companion.shared.models import AppChartsPayload, GatewayApp


@runtime_checkable
class ContentExtractor(Protocol):
    """Pure functions from a SteamDB page to typed records."""

    def parse_apps(self, html: str) -> list[GatewayApp]:
        """Every app row on a listing page (home, search, collections)."""
        ...

    def parse_app_overview(self, html: str, app_id: int) -> GatewayApp:
        """The app described by an ``/app/{id}/`` page."""
        ...

    def parse_charts(self, html: str, app_id: int) -> AppChartsPayload:
        """Price history and player trend from an ``/app/{id}/charts/`` page."""
        ...
