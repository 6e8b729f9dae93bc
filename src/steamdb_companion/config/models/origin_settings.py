"""Remote endpoint configuration models.

One model per remote: the SteamDB origin, the edge gateway and the
public Steam store API.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from steamdb_companion.shared.constants import (
    GatewayConfig,
    NetworkConfig,
    OriginConfig,
    SteamStoreConfig,
)


class RemoteSettings(BaseModel):
    """Settings every remote client shares."""

    timeout: float = Field(
        default=NetworkConfig.DEFAULT_TIMEOUT,
        gt=0,
        description="Per-call timeout in seconds",
    )
    retry_attempts: int = Field(
        default=NetworkConfig.DEFAULT_RETRY_ATTEMPTS,
        ge=0,
        description="Retries after the first attempt",
    )
    retry_delay: float = Field(
        default=NetworkConfig.DEFAULT_RETRY_DELAY,
        ge=0,
        description="Initial backoff delay in seconds",
    )
    rate_limit_rps: float = Field(
        default=NetworkConfig.DEFAULT_TOKEN_REFILL_RATE,
        gt=0,
        description="Requests per second",
    )
    rate_limit_burst: int = Field(
        default=NetworkConfig.DEFAULT_TOKEN_BUCKET_CAPACITY,
        gt=0,
        description="Token bucket capacity",
    )
    concurrent_requests: int = Field(
        default=NetworkConfig.DEFAULT_CONCURRENT_REQUESTS,
        gt=0,
        description="Maximum in-flight requests",
    )


class OriginSettings(RemoteSettings):
    """SteamDB origin."""

    base_url: str = Field(default=OriginConfig.BASE_URL)
    user_agent: str = Field(default=OriginConfig.USER_AGENT)


class GatewaySettings(RemoteSettings):
    """Edge gateway, as seen from a client.

    With no ``base_url`` the client skips the structured-API step of
    every chain.
    """

    base_url: str | None = Field(default=None)
    user_agent: str = Field(default=GatewayConfig.USER_AGENT)
    parser_version: str = Field(default=GatewayConfig.PARSER_VERSION)
    retry_attempts: int = Field(default=0, ge=0)


class SteamStoreSettings(RemoteSettings):
    """Public Steam store API."""

    base_url: str = Field(default=SteamStoreConfig.BASE_URL)
    user_agent: str = Field(default=GatewayConfig.USER_AGENT)
    country: str = Field(default=SteamStoreConfig.COUNTRY)
    language: str = Field(default=SteamStoreConfig.LANGUAGE)


__all__ = [
    "GatewaySettings",
    "OriginSettings",
    "RemoteSettings",
    "SteamStoreSettings",
]
