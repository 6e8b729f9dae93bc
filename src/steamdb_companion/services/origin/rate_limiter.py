"""Token Bucket Rate Limiter implementation.

Thread-safe token bucket that paces requests to a remote so that a burst of
cache misses does not hammer a rate-limited origin.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Callable

from steamdb_companion.shared.constants import NetworkConfig
from steamdb_companion.shared.errors import create_validation_error

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter:
    """Thread-safe token bucket rate limiter.

    The bucket holds up to ``capacity`` tokens and gains ``refill_rate``
    tokens per second. Each request consumes one.

    Args:
        capacity: Maximum number of tokens the bucket can hold
        refill_rate: Number of tokens to add per second
        clock: Monotonic time source in seconds

    Raises:
        DomainError: If capacity or refill_rate are not positive
    """

    def __init__(
        self,
        capacity: int = NetworkConfig.DEFAULT_TOKEN_BUCKET_CAPACITY,
        refill_rate: float = NetworkConfig.DEFAULT_TOKEN_REFILL_RATE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise create_validation_error(
                f"Capacity must be positive, got: {capacity}",
                field="capacity",
                operation="rate_limiter_init",
            )
        if refill_rate <= 0:
            raise create_validation_error(
                f"Refill rate must be positive, got: {refill_rate}",
                field="refill_rate",
                operation="rate_limiter_init",
            )

        self.capacity = capacity
        self.refill_rate = refill_rate
        self._clock = clock
        self.tokens = float(capacity)
        self.last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        """Add the tokens earned since the last refill. Caller holds the lock."""
        now = self._clock()
        elapsed = now - self.last_refill
        if elapsed > 0:
            self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
            self.last_refill = now

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take ``tokens`` from the bucket if available.

        Returns:
            True if the tokens were taken, False otherwise

        Raises:
            DomainError: If ``tokens`` is not positive or exceeds capacity
        """
        if tokens <= 0 or tokens > self.capacity:
            raise create_validation_error(
                f"Tokens to acquire must be in 1..{self.capacity}, got: {tokens}",
                field="tokens",
                operation="rate_limiter_acquire",
            )

        with self._lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False

    async def acquire(
        self,
        tokens: int = 1,
        poll_interval: float = NetworkConfig.RATE_LIMIT_POLL_INTERVAL,
    ) -> None:
        """Wait until ``tokens`` can be taken, then take them."""
        while not self.try_acquire(tokens):
            await asyncio.sleep(poll_interval)

    def get_tokens_available(self) -> int:
        with self._lock:
            self._refill()
            return int(self.tokens)

    def reset(self) -> None:
        """Refill the bucket to capacity."""
        with self._lock:
            self.tokens = float(self.capacity)
            self.last_refill = self._clock()
        logger.debug("Rate limiter reset to %d tokens", self.capacity)
