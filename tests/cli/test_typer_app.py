"""Tests for the Typer CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from steamdb_companion import __version__
from steamdb_companion.cli import app
from steamdb_companion.cli.commands.alerts import open_alert_engine
from steamdb_companion.cli.commands.cache import Tier, open_store
from steamdb_companion.config import Settings, load_settings
from steamdb_companion.services.alerts import EntitySnapshot

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        f'[app]\nstate_dir = "{tmp_path.as_posix()}"\n\n[logging]\nlevel = "ERROR"\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def cli_settings(config_path: Path) -> Settings:
    return load_settings(config_path)


def seed_client_cache(settings: Settings, records: dict) -> None:
    store = open_store(settings, Tier.CLIENT)
    try:
        for key, value in records.items():
            asyncio.run(store.put(key, value))
    finally:
        store.close()


def invoke_json(config_path: Path, *args: str) -> tuple[int, dict]:
    result = runner.invoke(app, ["--config", str(config_path), "--json", *args])
    return result.exit_code, orjson.loads(result.stdout)


class TestRoot:
    def test_version_option(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_command_json(self, config_path: Path) -> None:
        exit_code, envelope = invoke_json(config_path, "version")

        assert exit_code == 0
        assert envelope["success"] is True
        assert envelope["data"] == {"name": "steamdb-companion", "version": __version__}

    def test_missing_config_fails_with_error_envelope(self, tmp_path: Path) -> None:
        """Failure-First: startup errors still answer with the JSON envelope."""
        result = runner.invoke(app, ["--config", str(tmp_path / "absent.toml"), "--json", "version"])

        assert result.exit_code == 1
        assert '"success": false' in result.output
        assert "CONFIG_MISSING" in result.output

    def test_invalid_log_level_is_a_usage_error(self, config_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_path), "--log-level", "LOUD", "version"])

        assert result.exit_code == 2


class TestCacheCommands:
    def test_list(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"trending": [1], "app_details_620": {"id": 620}})

        exit_code, envelope = invoke_json(config_path, "cache", "list")

        assert exit_code == 0
        assert [row["key"] for row in envelope["data"]["records"]] == ["app_details_620", "trending"]

    def test_list_table(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"trending": [1]})

        result = runner.invoke(app, ["--config", str(config_path), "cache", "list"])

        assert result.exit_code == 0
        assert "trending" in result.stdout

    def test_show(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"trending": [{"id": 620, "name": "Portal 2"}]})

        exit_code, envelope = invoke_json(config_path, "cache", "show", "trending")

        assert exit_code == 0
        assert envelope["data"]["value"] == [{"id": 620, "name": "Portal 2"}]

    def test_show_missing_key_exits_1(self, config_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_path), "cache", "show", "nope"])

        assert result.exit_code == 1
        assert "No record" in result.stdout

    def test_stats(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"a": 1, "b": 2})

        exit_code, envelope = invoke_json(config_path, "cache", "stats")

        assert exit_code == 0
        assert envelope["data"]["backend"] == "json"
        assert envelope["data"]["records"] == 2

    def test_edge_tier_stats(self, config_path: Path) -> None:
        exit_code, envelope = invoke_json(config_path, "cache", "stats", "--tier", "edge")

        assert exit_code == 0
        assert envelope["data"]["backend"] == "sqlite"
        assert envelope["data"]["records"] == 0

    def test_clear_with_yes(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"a": 1})

        result = runner.invoke(app, ["--config", str(config_path), "cache", "clear", "--yes"])

        assert result.exit_code == 0
        _, envelope = invoke_json(config_path, "cache", "stats")
        assert envelope["data"]["records"] == 0

    def test_clear_declined_keeps_records(self, config_path: Path, cli_settings: Settings) -> None:
        seed_client_cache(cli_settings, {"a": 1})

        result = runner.invoke(app, ["--config", str(config_path), "cache", "clear"], input="n\n")

        assert result.exit_code == 1
        _, envelope = invoke_json(config_path, "cache", "stats")
        assert envelope["data"]["records"] == 1


class TestAlertCommands:
    def test_history_and_clear(self, config_path: Path, cli_settings: Settings) -> None:
        # Given two refreshes with a price drop between them
        engine = open_alert_engine(cli_settings)
        engine.refresh([EntitySnapshot(id=620, name="Portal 2", price=9.99)])
        engine.refresh([EntitySnapshot(id=620, name="Portal 2", price=1.99)])

        # When
        exit_code, envelope = invoke_json(config_path, "alerts", "history")

        # Then
        assert exit_code == 0
        assert [record["kind"] for record in envelope["data"]] == ["priceDrop"]

        assert runner.invoke(app, ["--config", str(config_path), "alerts", "clear"]).exit_code == 0
        _, envelope = invoke_json(config_path, "alerts", "history")
        assert envelope["data"] == []

    def test_empty_history_table(self, config_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_path), "alerts", "history"])

        assert result.exit_code == 0
        assert "No changes recorded yet" in result.stdout
