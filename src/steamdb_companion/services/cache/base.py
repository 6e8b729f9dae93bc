"""Keyed cache store contract.

A store maps opaque string keys to JSON-serializable values stamped with
the time they were written. It computes age and expiry on read but never
deletes a record because of its age: records go away only through
``clear()``, ``delete()`` or being overwritten.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from steamdb_companion.shared.errors import (
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    create_validation_error,
)
from steamdb_companion.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
R = TypeVar("R")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheRecord:
    """One stored value and the moment it was written."""

    key: str
    value: Any
    written_at: datetime

    def age(self, now: datetime) -> float:
        """Seconds since the record was written (never negative)."""
        return max(0.0, (now - self.written_at).total_seconds())

    def is_expired(self, ttl: float, now: datetime) -> bool:
        # Whole seconds: a record read back within the same second is age 0.
        return int(self.age(now)) > ttl


@dataclass(frozen=True)
class StaleRecord:
    """Result of ``get_allow_stale``: the value, its age and whether it expired."""

    value: Any
    age: float
    expired: bool


@dataclass
class CacheStats:
    """In-process counters for one store instance."""

    hits: int = 0
    misses: int = 0
    stale_reads: int = 0
    writes: int = 0
    write_failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class KeyedCacheStore(ABC):
    """Async keyed cache with age-based expiry.

    Subclasses implement the synchronous ``_read_record`` / ``_write_record``
    family; this class runs them off the event loop, applies TTLs, keeps
    counters and turns write failures into log records.

    Args:
        clock: Returns the current UTC time. Injectable for tests.
    """

    backend_name = "abstract"

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()

    # ----------------------------------------------------------------- API

    async def put(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key`` with the current timestamp.

        The previous record for ``key``, if any, is replaced entirely.
        Failures are logged and swallowed.

        Returns:
            True if the record was written
        """
        written_at = self._clock()
        try:
            await self._run(self._write_record, key, value, written_at)
        except Exception as e:  # noqa: BLE001
            code = (
                ErrorCode.CACHE_SERIALIZATION_ERROR
                if isinstance(e, TypeError)
                else ErrorCode.CACHE_WRITE_FAILED
            )
            error = InfrastructureError(
                code=code,
                message=f"Failed to write cache record: {e!s}",
                context=ErrorContext(
                    operation="cache_put",
                    cache_key=key,
                    additional_data={"backend": self.backend_name},
                ),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="cache_put")
            self._count("write_failures")
            return False

        self._count("writes")
        return True

    async def get(self, key: str, ttl: float) -> Any | None:
        """Return the value for ``key`` if it exists and ``age <= ttl``.

        Expired records are left in place.
        """
        self._validate_ttl(ttl)
        record = await self._load(key)
        if record is None or record.is_expired(ttl, self._clock()):
            self._count("misses")
            return None

        self._count("hits")
        return record.value

    async def get_allow_stale(self, key: str, ttl: float) -> StaleRecord | None:
        """Return any record for ``key`` regardless of age, annotated with expiry."""
        self._validate_ttl(ttl)
        record = await self._load(key)
        if record is None:
            return None

        now = self._clock()
        self._count("stale_reads")
        return StaleRecord(
            value=record.value,
            age=record.age(now),
            expired=record.is_expired(ttl, now),
        )

    async def inspect(self, key: str) -> CacheRecord | None:
        """Return the raw record for ``key`` without touching counters."""
        return await self._load(key)

    async def delete(self, key: str) -> bool:
        """Remove one record. Returns whether it existed."""
        return await self._run(self._delete_record, key)

    async def keys(self) -> list[str]:
        """All stored keys, sorted."""
        return sorted(await self._run(self._list_keys))

    async def clear(self) -> None:
        """Remove every record."""
        await self._run(self._clear_records)
        logger.info("Cleared %s cache", self.backend_name)

    @property
    def stats(self) -> CacheStats:
        with self._stats_lock:
            return CacheStats(**self._stats.to_dict())

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""

    # ------------------------------------------------------------ internals

    async def _run(self, func: Callable[..., R], *args: Any) -> R:
        """Run blocking backend I/O in a worker thread."""
        return await asyncio.to_thread(func, *args)

    async def _load(self, key: str) -> CacheRecord | None:
        try:
            return await self._run(self._read_record, key)
        except Exception as e:  # noqa: BLE001
            # Unreadable or corrupted records count as absent.
            logger.warning(
                "Treating unreadable cache record '%s' as absent: %s",
                key,
                e,
                extra={
                    "error_code": ErrorCode.CACHE_READ_FAILED.name,
                    "context": {"cache_key": key, "backend": self.backend_name},
                },
            )
            return None

    def _count(self, field: str) -> None:
        with self._stats_lock:
            setattr(self._stats, field, getattr(self._stats, field) + 1)

    @staticmethod
    def _validate_ttl(ttl: float) -> None:
        if ttl < 0:
            raise create_validation_error(
                f"TTL must not be negative, got: {ttl}",
                field="ttl",
                operation="cache_get",
            )

    @abstractmethod
    def _read_record(self, key: str) -> CacheRecord | None:
        """Return the record for ``key`` or None. May raise on corruption."""

    @abstractmethod
    def _write_record(self, key: str, value: Any, written_at: datetime) -> None:
        """Replace the record for ``key``. Raises on failure."""

    @abstractmethod
    def _delete_record(self, key: str) -> bool: ...

    @abstractmethod
    def _list_keys(self) -> list[str]: ...

    @abstractmethod
    def _clear_records(self) -> None: ...
