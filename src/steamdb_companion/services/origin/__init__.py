"""Remote clients: SteamDB origin, edge gateway and Steam store API."""

from .extractor import ContentExtractor
from .gateway_client import GatewayClient
from .origin_client import OriginClient
from .rate_limiter import TokenBucketRateLimiter
from .session_manager import AsyncSessionManager
from .state_machine import RateLimitState, RateLimitStateMachine
from .steam_store_client import SteamStoreClient

__all__ = [
    "AsyncSessionManager",
    "ContentExtractor",
    "GatewayClient",
    "OriginClient",
    "RateLimitState",
    "RateLimitStateMachine",
    "SteamStoreClient",
    "TokenBucketRateLimiter",
]
