"""In-process cache store.

Values are held as serialized JSON so that a read never hands back an
object another caller can mutate, and unserializable values fail the same
way they do on the durable backends.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable

import orjson

from .base import CacheRecord, Clock, KeyedCacheStore, R


class MemoryCacheStore(KeyedCacheStore):
    """Dict-backed store; nothing survives the process."""

    backend_name = "memory"

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._records: dict[str, tuple[bytes, datetime]] = {}
        self._lock = threading.Lock()

    async def _run(self, func: Callable[..., R], *args: Any) -> R:
        return func(*args)

    def _read_record(self, key: str) -> CacheRecord | None:
        with self._lock:
            entry = self._records.get(key)
        if entry is None:
            return None
        payload, written_at = entry
        return CacheRecord(key=key, value=orjson.loads(payload), written_at=written_at)

    def _write_record(self, key: str, value: Any, written_at: datetime) -> None:
        payload = orjson.dumps(value)
        with self._lock:
            self._records[key] = (payload, written_at)

    def _delete_record(self, key: str) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None

    def _list_keys(self) -> list[str]:
        with self._lock:
            return list(self._records)

    def _clear_records(self) -> None:
        with self._lock:
            self._records.clear()
