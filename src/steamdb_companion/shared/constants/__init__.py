"""
SteamDB Companion Constants Module

Centralized constants so that TTLs, paths and thresholds are defined once.
"""

from .alerts import AlertConfig
from .cache import (
    BASE_DAY,
    BASE_HOUR,
    BASE_MINUTE,
    BASE_SECOND,
    BaseCacheConfig,
    ClientCacheConfig,
    EdgeCacheConfig,
)
from .network import (
    GatewayConfig,
    NetworkConfig,
    OriginConfig,
    SteamStoreConfig,
)
from .system import Application, FileSystem, Logging

__all__ = [
    "BASE_DAY",
    "BASE_HOUR",
    "BASE_MINUTE",
    "BASE_SECOND",
    "AlertConfig",
    "Application",
    "BaseCacheConfig",
    "ClientCacheConfig",
    "EdgeCacheConfig",
    "FileSystem",
    "GatewayConfig",
    "Logging",
    "NetworkConfig",
    "OriginConfig",
    "SteamStoreConfig",
]
