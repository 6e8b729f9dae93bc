"""
Pytest configuration and shared fixtures for SteamDB Companion tests.

Clocks are injectable everywhere, so tests move time forward explicitly
instead of sleeping.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from steamdb_companion.config.models import Settings
from steamdb_companion.services.cache import MemoryCacheStore
from steamdb_companion.shared.models import AppChartsPayload, GatewayApp

# Keep a developer's real configuration out of the tests.
for _name in list(os.environ):
    if _name.startswith("STEAMDB_COMPANION_"):
        del os.environ[_name]


class FakeClock:
    """Wall clock for cache stores; starts at a fixed UTC instant."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMonotonic:
    """Monotonic clock for the rate limiter and state machine."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExtractor:
    """Extractor returning canned records and remembering what it parsed."""

    def __init__(self, apps: list[GatewayApp] | None = None) -> None:
        self.apps = apps if apps is not None else [make_app(1, "Portal"), make_app(2, "Portal 2")]
        self.pages: list[str] = []

    def parse_apps(self, html: str) -> list[GatewayApp]:
        self.pages.append(html)
        return list(self.apps)

    def parse_app_overview(self, html: str, app_id: int) -> GatewayApp:
        self.pages.append(html)
        return make_app(app_id, f"App {app_id}")

    def parse_charts(self, html: str, app_id: int) -> AppChartsPayload:
        self.pages.append(html)
        return AppChartsPayload(
            app_id=app_id,
            price_history=[{"date": "2024-01-01T00:00:00Z", "price": 9.99}],
            player_trend=[{"date": "2024-01-01T00:00:00Z", "players": 1200}],
        )


class FakeOrigin:
    """Stands in for OriginClient.fetch_text; pages keyed by path."""

    def __init__(self, pages: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self.pages = pages or {}
        self.error = error
        self.calls: list[tuple[str, dict | None]] = []

    async def fetch_text(self, path: str, params: dict | None = None) -> str:
        self.calls.append((path, params))
        if self.error is not None:
            raise self.error
        return self.pages.get(path, f"<html>{path}</html>")


def make_app(app_id: int, name: str, **fields) -> GatewayApp:
    return GatewayApp(id=app_id, name=name, **fields)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings whose every persisted file lands under ``tmp_path``."""
    return Settings(app={"state_dir": tmp_path})


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()
