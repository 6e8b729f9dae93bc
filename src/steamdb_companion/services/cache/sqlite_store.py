"""SQLite cache store.

Durable key-value store for the edge gateway. Payloads are stored as JSON
text next to the ISO timestamp they were written at; ``INSERT OR REPLACE``
gives last-write-wins on concurrent writes to one key.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson

from steamdb_companion.shared.constants import BaseCacheConfig
from steamdb_companion.shared.errors import (
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)
from steamdb_companion.shared.logging import log_operation_error, log_operation_success

from .base import CacheRecord, Clock, KeyedCacheStore

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cache_records (
    cache_key TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    written_at TEXT NOT NULL,
    CHECK (length(cache_key) > 0)
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
);
"""


class SQLiteCacheStore(KeyedCacheStore):
    """SQLite-backed store in WAL mode.

    One connection is shared by the worker threads that run the blocking
    calls; a lock serializes access to it.

    Args:
        db_path: Path to the SQLite database file
        clock: Returns the current UTC time

    Raises:
        InfrastructureError: If the database cannot be opened or initialized

    Example:
        >>> store = SQLiteCacheStore(Path("edge_cache.db"))
        >>> await store.put("route:home", {"trending": []})
        >>> await store.get("route:home", ttl=300)
        {'trending': []}
    """

    backend_name = "sqlite"

    def __init__(self, db_path: Path | str, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self.conn: sqlite3.Connection | None = None
        self._initialize_db()

    def _initialize_db(self) -> None:
        context = ErrorContext(
            operation="initialize_db",
            additional_data={"db_path": str(self.db_path)},
        )

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                isolation_level=None,
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.executescript(_SCHEMA_SQL)
            self.conn.execute(
                "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                (BaseCacheConfig.SCHEMA_VERSION,),
            )

            log_operation_success(
                logger=logger,
                operation="initialize_db",
                duration_ms=0,
                context=context,
            )

        except (sqlite3.Error, OSError) as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_INITIALIZATION_FAILED,
                message=f"Failed to initialize SQLite cache: {e!s}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="initialize_db")
            raise error from e

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise sqlite3.ProgrammingError("Cache database is closed")
        return self.conn

    def _read_record(self, key: str) -> CacheRecord | None:
        with self._lock:
            row = (
                self._connection()
                .execute(
                    "SELECT payload, written_at FROM cache_records WHERE cache_key = ?",
                    (key,),
                )
                .fetchone()
            )
        if row is None:
            return None

        payload, written_at = row
        return CacheRecord(
            key=key,
            value=orjson.loads(payload),
            written_at=datetime.fromisoformat(written_at),
        )

    def _write_record(self, key: str, value: Any, written_at: datetime) -> None:
        payload = orjson.dumps(value).decode("utf-8")
        with self._lock:
            self._connection().execute(
                "INSERT OR REPLACE INTO cache_records (cache_key, payload, written_at) "
                "VALUES (?, ?, ?)",
                (key, payload, written_at.isoformat()),
            )

    def _delete_record(self, key: str) -> bool:
        with self._lock:
            cursor = self._connection().execute(
                "DELETE FROM cache_records WHERE cache_key = ?",
                (key,),
            )
        return cursor.rowcount > 0

    def _list_keys(self) -> list[str]:
        with self._lock:
            rows = self._connection().execute("SELECT cache_key FROM cache_records").fetchall()
        return [row[0] for row in rows]

    def _clear_records(self) -> None:
        with self._lock:
            self._connection().execute("DELETE FROM cache_records")

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
                logger.debug("Closed SQLite cache at %s", self.db_path)
