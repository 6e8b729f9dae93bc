"""SteamDB Companion Settings Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from steamdb_companion.config.models.alert_settings import AlertSettings
from steamdb_companion.config.models.app_settings import AppSettings, LoggingSettings
from steamdb_companion.config.models.cache_settings import CacheSettings
from steamdb_companion.config.models.origin_settings import (
    GatewaySettings,
    OriginSettings,
    SteamStoreSettings,
)


class Settings(BaseSettings):
    """Unified configuration for both tiers.

    Values come from (lowest to highest priority) defaults, a TOML file and
    ``STEAMDB_COMPANION_*`` environment variables, with ``__`` separating
    nested fields (``STEAMDB_COMPANION_ALERTS__METRIC_THRESHOLD=0.3``).
    """

    model_config = SettingsConfigDict(
        env_prefix="STEAMDB_COMPANION_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    origin: OriginSettings = Field(default_factory=OriginSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    steam_api: SteamStoreSettings = Field(default_factory=SteamStoreSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats values passed in (which is where TOML content lands).
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def resolve_path(self, path: Path | str) -> Path:
        """Resolve a configured path against ``app.state_dir``."""
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return Path(self.app.state_dir).expanduser() / path

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
