"""Tests for Settings and the settings loader."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from steamdb_companion.config import Settings, SettingsLoader, load_settings
from steamdb_companion.config import loader as loader_module
from steamdb_companion.shared.errors import ApplicationError, ErrorCode


def write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a stray .env in the working directory out of these tests.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return write_config(
        tmp_path / "config.toml",
        f"""
[app]
state_dir = "{tmp_path.as_posix()}"

[alerts]
metric_threshold = 0.3

[cache]
client_backend = "SQLITE"

[cache.edge_ttl]
home = 60
""",
    )


class TestLoadSettings:
    def test_values_come_from_toml(self, config_file: Path, tmp_path: Path) -> None:
        settings = load_settings(config_file)

        assert settings.app.state_dir == tmp_path
        assert settings.alerts.metric_threshold == 0.3
        assert settings.cache.client_backend == "sqlite"
        assert settings.cache.edge_ttl.home == 60
        assert settings.cache.edge_ttl.search == 180

    def test_environment_beats_toml(self, config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STEAMDB_COMPANION_ALERTS__METRIC_THRESHOLD", "0.5")

        settings = load_settings(config_file)

        assert settings.alerts.metric_threshold == 0.5
        assert settings.cache.edge_ttl.home == 60

    def test_env_file_is_loaded(self, config_file: Path, tmp_path: Path) -> None:
        write_config(tmp_path / ".env", "STEAMDB_COMPANION_LOGGING__LEVEL=debug\n")

        try:
            settings = load_settings(config_file)
        finally:
            os.environ.pop("STEAMDB_COMPANION_LOGGING__LEVEL", None)

        assert settings.logging.level == "DEBUG"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Failure-First: an explicit path that does not exist."""
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "nope.toml")

        assert exc_info.value.code == ErrorCode.CONFIG_MISSING

    @pytest.mark.parametrize(
        "body",
        [
            '[cache]\nedge_backend = "redis"\n',
            "[alerts]\nmetric_threshold = -1\n",
            '[logging]\nlevel = "LOUD"\n',
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str) -> None:
        path = write_config(tmp_path / "bad.toml", body)

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID

    def test_malformed_toml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "broken.toml", "[app\nstate_dir = ")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID

    def test_no_file_anywhere_uses_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(loader_module, "_default_config_paths", lambda: [tmp_path / "absent.toml"])

        settings = load_settings()

        assert settings.cache.edge_backend == "sqlite"
        assert settings.gateway.base_url is None


class TestSettingsLoader:
    def test_caches_until_reload(self, config_file: Path) -> None:
        loader = SettingsLoader(config_file)

        first = loader.get_config()

        assert loader.get_config() is first
        assert loader.reload_config() is not first


class TestSettings:
    def test_resolve_path(self, tmp_path: Path) -> None:
        settings = Settings(app={"state_dir": tmp_path})

        assert settings.resolve_path("edge.db") == tmp_path / "edge.db"
        assert settings.resolve_path(tmp_path / "x" / "abs.db") == tmp_path / "x" / "abs.db"

    def test_toml_round_trip(self, tmp_path: Path) -> None:
        original = Settings(app={"state_dir": tmp_path}, alerts={"history_limit": 50})
        path = tmp_path / "out" / "config.toml"

        original.to_toml_file(path)
        restored = Settings.from_toml_file(path)

        assert restored.alerts.history_limit == 50
        assert restored.app.state_dir == tmp_path
