"""Rate Limiting State Machine implementation.

Tracks how the origin has been answering and decides whether the next
request should go out at all:

* NORMAL: requests flow.
* THROTTLE: a 429 was received; requests are refused until its
  Retry-After (or the backoff) has elapsed.
* CACHE_ONLY: the recent error rate crossed the threshold; requests are
  refused until the cooldown elapses, so callers serve from cache.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from enum import Enum
from typing import Any, Callable

from steamdb_companion.shared.constants import NetworkConfig

logger = logging.getLogger(__name__)


class RateLimitState(Enum):
    NORMAL = "normal"
    THROTTLE = "throttle"
    CACHE_ONLY = "cache_only"


class RateLimitStateMachine:
    """State machine for origin rate limiting and error handling.

    Args:
        error_threshold: Percentage of errors (429/5xx) that opens the circuit
        time_window: Window in seconds for the error rate
        max_retry_after: Cap in seconds for Retry-After values
        cache_only_cooldown: Seconds spent in CACHE_ONLY before retrying
        clock: Monotonic time source in seconds
    """

    def __init__(
        self,
        error_threshold: float = NetworkConfig.DEFAULT_ERROR_THRESHOLD,
        time_window: int = NetworkConfig.DEFAULT_ERROR_WINDOW,
        max_retry_after: int = NetworkConfig.DEFAULT_MAX_RETRY_AFTER,
        cache_only_cooldown: int = NetworkConfig.DEFAULT_CACHE_ONLY_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.error_threshold = error_threshold
        self.time_window = time_window
        self.max_retry_after = max_retry_after
        self.cache_only_cooldown = cache_only_cooldown
        self._clock = clock

        self._state = RateLimitState.NORMAL
        # Reentrant: handle_error hands 429s to handle_429 under the lock.
        self._lock = threading.RLock()
        self._error_timestamps: deque[float] = deque()
        self._success_timestamps: deque[float] = deque()
        self._last_429_time = 0.0
        self._retry_after_delay = 0.0
        self._cache_only_since = 0.0

    @property
    def state(self) -> RateLimitState:
        with self._lock:
            self._maybe_leave_cache_only()
            return self._state

    def handle_429(self, retry_after: float | None = None) -> None:
        """Record a 429 and move to THROTTLE.

        Args:
            retry_after: Retry-After header value in seconds, if sent
        """
        with self._lock:
            now = self._clock()
            self._last_429_time = now
            self._error_timestamps.append(now)

            if retry_after is not None:
                self._retry_after_delay = min(max(retry_after, 0.0), float(self.max_retry_after))
            else:
                self._retry_after_delay = min(
                    NetworkConfig.MAX_429_BACKOFF,
                    max(NetworkConfig.DEFAULT_429_BACKOFF, self._retry_after_delay * 2),
                )

            if self._state is not RateLimitState.CACHE_ONLY:
                self._state = RateLimitState.THROTTLE
            self._clean_old_timestamps()
            logger.warning("Origin rate limited; throttling for %.1fs", self._retry_after_delay)

    def handle_success(self) -> None:
        with self._lock:
            now = self._clock()
            self._success_timestamps.append(now)
            self._clean_old_timestamps()

            if self._state is RateLimitState.THROTTLE and now - self._last_429_time >= self._retry_after_delay:
                self._state = RateLimitState.NORMAL
                self._retry_after_delay = 0.0

    def handle_error(self, status_code: int) -> None:
        """Record a failed response (status 0 for transport failures)."""
        with self._lock:
            if status_code == 429:
                self.handle_429()
            else:
                self._error_timestamps.append(self._clock())
                self._clean_old_timestamps()

            if self._should_trigger_circuit_breaker() and self._state is not RateLimitState.CACHE_ONLY:
                self._state = RateLimitState.CACHE_ONLY
                self._cache_only_since = self._clock()
                logger.warning(
                    "Origin error rate above %.0f%%; cache-only for %ds",
                    self.error_threshold,
                    self.cache_only_cooldown,
                )

    def should_make_request(self) -> bool:
        with self._lock:
            self._maybe_leave_cache_only()
            if self._state is RateLimitState.CACHE_ONLY:
                return False
            if self._state is RateLimitState.THROTTLE:
                return self._clock() - self._last_429_time >= self._retry_after_delay
            return True

    def get_retry_delay(self) -> float:
        """Seconds until the next request would be allowed."""
        with self._lock:
            now = self._clock()
            if self._state is RateLimitState.THROTTLE:
                return max(0.0, self._retry_after_delay - (now - self._last_429_time))
            if self._state is RateLimitState.CACHE_ONLY:
                return max(0.0, self.cache_only_cooldown - (now - self._cache_only_since))
            return 0.0

    def reset(self) -> None:
        with self._lock:
            self._state = RateLimitState.NORMAL
            self._error_timestamps.clear()
            self._success_timestamps.clear()
            self._last_429_time = 0.0
            self._retry_after_delay = 0.0
            self._cache_only_since = 0.0

    def _maybe_leave_cache_only(self) -> None:
        if (
            self._state is RateLimitState.CACHE_ONLY
            and self._clock() - self._cache_only_since >= self.cache_only_cooldown
        ):
            logger.info("Cache-only cooldown elapsed; resuming origin requests")
            self._state = RateLimitState.NORMAL
            self._error_timestamps.clear()
            self._success_timestamps.clear()

    def _clean_old_timestamps(self) -> None:
        cutoff = self._clock() - self.time_window
        while self._error_timestamps and self._error_timestamps[0] < cutoff:
            self._error_timestamps.popleft()
        while self._success_timestamps and self._success_timestamps[0] < cutoff:
            self._success_timestamps.popleft()

    def _should_trigger_circuit_breaker(self) -> bool:
        error_count = len(self._error_timestamps)
        total = error_count + len(self._success_timestamps)
        if total < NetworkConfig.MIN_REQUESTS_FOR_CIRCUIT:
            return False
        return (error_count / total) * 100 >= self.error_threshold

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            errors = len(self._error_timestamps)
            successes = len(self._success_timestamps)
            total = errors + successes
            return {
                "state": self._state.value,
                "recent_errors": errors,
                "recent_successes": successes,
                "error_rate_percent": (errors / total * 100) if total else 0.0,
                "retry_delay": self.get_retry_delay(),
            }
