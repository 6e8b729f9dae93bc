"""File-based JSON cache store.

Embedded disk cache for the client tier: one orjson file per key, named by
the SHA-256 of the key. Writes go to a temporary file in the same
directory and are moved into place, so a reader never sees half a record.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel, Field

from steamdb_companion.shared.constants import BaseCacheConfig
from steamdb_companion.shared.errors import (
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)
from steamdb_companion.shared.logging import log_operation_error

from .base import CacheRecord, Clock, KeyedCacheStore

logger = logging.getLogger(__name__)


class CacheEnvelope(BaseModel):
    """On-disk layout of one cache file.

    Attributes:
        key: The original cache key
        key_hash: SHA-256 of the key (the file name stem)
        written_at: When the value was written
        value: The cached payload
    """

    key: str = Field(..., min_length=1)
    key_hash: str = Field(..., min_length=64, max_length=64)
    written_at: datetime
    value: Any = None


class JSONFileCacheStore(KeyedCacheStore):
    """Directory of JSON files, one per key.

    Args:
        cache_dir: Directory holding the cache files (created if missing)
        clock: Returns the current UTC time

    Raises:
        InfrastructureError: If the directory cannot be created
    """

    backend_name = "json"

    def __init__(self, cache_dir: Path | str, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self.cache_dir = Path(cache_dir)
        self._lock = threading.Lock()

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_INITIALIZATION_FAILED,
                message=f"Failed to create cache directory: {e!s}",
                context=ErrorContext(
                    operation="initialize_cache_dir",
                    additional_data={"cache_dir": str(self.cache_dir)},
                ),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="initialize_cache_dir")
            raise error from e

    @staticmethod
    def _hash_key(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def _file_for(self, key: str) -> Path:
        return self.cache_dir / f"{self._hash_key(key)}{BaseCacheConfig.CACHE_FILE_SUFFIX}"

    def _cache_files(self) -> list[Path]:
        return list(self.cache_dir.glob(f"*{BaseCacheConfig.CACHE_FILE_SUFFIX}"))

    def _read_record(self, key: str) -> CacheRecord | None:
        cache_file = self._file_for(key)
        with self._lock:
            if not cache_file.exists():
                return None
            raw = cache_file.read_bytes()

        envelope = CacheEnvelope.model_validate(orjson.loads(raw))
        if envelope.key != key:
            # SHA-256 collision or a file copied in by hand.
            logger.warning("Cache file %s holds key '%s', not '%s'", cache_file.name, envelope.key, key)
            return None

        return CacheRecord(key=key, value=envelope.value, written_at=envelope.written_at)

    def _write_record(self, key: str, value: Any, written_at: datetime) -> None:
        key_hash = self._hash_key(key)
        payload = orjson.dumps(
            {
                "key": key,
                "key_hash": key_hash,
                "written_at": written_at.isoformat(),
                "value": value,
            }
        )
        target = self._file_for(key)

        with self._lock:
            fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{key_hash[:16]}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as tmp_file:
                    tmp_file.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def _delete_record(self, key: str) -> bool:
        cache_file = self._file_for(key)
        with self._lock:
            if not cache_file.exists():
                return False
            cache_file.unlink()
        return True

    def _list_keys(self) -> list[str]:
        keys: list[str] = []
        with self._lock:
            files = self._cache_files()
            for cache_file in files:
                try:
                    keys.append(orjson.loads(cache_file.read_bytes())["key"])
                except (OSError, orjson.JSONDecodeError, KeyError, TypeError) as e:
                    logger.warning("Skipping unreadable cache file %s: %s", cache_file.name, e)
        return keys

    def _clear_records(self) -> None:
        with self._lock:
            for cache_file in self._cache_files():
                cache_file.unlink(missing_ok=True)
