"""Cache store factory.

Maps the backend names used in configuration to store classes.
"""

from __future__ import annotations

from pathlib import Path

from steamdb_companion.shared.constants import BaseCacheConfig
from steamdb_companion.shared.errors import create_config_error

from .base import Clock, KeyedCacheStore
from .json_store import JSONFileCacheStore
from .memory_store import MemoryCacheStore
from .sqlite_store import SQLiteCacheStore


def create_cache_store(
    backend: str,
    location: Path | str | None = None,
    clock: Clock | None = None,
) -> KeyedCacheStore:
    """Build a store for ``backend``.

    Args:
        backend: One of ``sqlite``, ``json`` or ``memory``
        location: Database file (sqlite) or directory (json); unused for memory
        clock: Optional clock override

    Raises:
        ApplicationError: If the backend is unknown or needs a location
    """
    backend = backend.lower()

    if backend == BaseCacheConfig.BACKEND_MEMORY:
        return MemoryCacheStore(clock=clock)

    if location is None:
        raise create_config_error(
            f"Cache backend '{backend}' requires a location",
            operation="create_cache_store",
        )

    if backend == BaseCacheConfig.BACKEND_SQLITE:
        return SQLiteCacheStore(location, clock=clock)
    if backend == BaseCacheConfig.BACKEND_JSON:
        return JSONFileCacheStore(location, clock=clock)

    raise create_config_error(
        f"Unknown cache backend: {backend}",
        operation="create_cache_store",
    )
