"""Configuration models."""

from .alert_settings import AlertSettings
from .app_settings import AppSettings, LoggingSettings
from .cache_settings import CacheSettings, ClientTTLSettings, EdgeTTLSettings
from .origin_settings import (
    GatewaySettings,
    OriginSettings,
    RemoteSettings,
    SteamStoreSettings,
)
from .settings import Settings

__all__ = [
    "AlertSettings",
    "AppSettings",
    "CacheSettings",
    "ClientTTLSettings",
    "EdgeTTLSettings",
    "GatewaySettings",
    "LoggingSettings",
    "OriginSettings",
    "RemoteSettings",
    "Settings",
    "SteamStoreSettings",
]
