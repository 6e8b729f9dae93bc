"""Keyed cache stores."""

from .base import CacheRecord, CacheStats, KeyedCacheStore, StaleRecord, utc_now
from .factory import create_cache_store
from .json_store import JSONFileCacheStore
from .memory_store import MemoryCacheStore
from .sqlite_store import SQLiteCacheStore

__all__ = [
    "CacheRecord",
    "CacheStats",
    "JSONFileCacheStore",
    "KeyedCacheStore",
    "MemoryCacheStore",
    "SQLiteCacheStore",
    "StaleRecord",
    "create_cache_store",
    "utc_now",
]
