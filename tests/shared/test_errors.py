"""Tests for the error hierarchy and its helpers."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import pytest

from steamdb_companion.shared.errors import (
    ApplicationError,
    CacheOnlyStepError,
    ChainExhaustedError,
    CompanionError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    OriginError,
    UpstreamError,
    create_config_error,
    create_origin_error,
    create_validation_error,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    def test_additional_data_is_coerced_to_primitives(self) -> None:
        context = ErrorContext(additional_data={"path": Path("a/b"), "kind": Color.RED, "n": 1})

        assert context.additional_data == {"path": str(Path("a/b")), "kind": "red", "n": 1}

    def test_non_primitive_value_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"items": [1, 2]})

    def test_safe_dict_masks_installation_id(self) -> None:
        context = ErrorContext(operation="watchlist", cache_key="watchlist:abc", installation_id="abc")

        assert context.safe_dict() == {
            "operation": "watchlist",
            "cache_key": "watchlist:abc",
            "additional_data": {},
        }

    def test_safe_dict_custom_mask(self) -> None:
        context = ErrorContext(operation="fetch", cache_key="route:home")

        assert "cache_key" not in context.safe_dict(mask_keys=("cache_key",))


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "base"),
        [
            (UpstreamError("down"), InfrastructureError),
            (OriginError(ErrorCode.ORIGIN_TIMEOUT, "slow"), InfrastructureError),
            (ChainExhaustedError("empty"), DomainError),
            (CacheOnlyStepError("trending"), DomainError),
            (create_config_error("bad"), ApplicationError),
        ],
    )
    def test_subclasses(self, error: CompanionError, base: type) -> None:
        assert isinstance(error, base)
        assert isinstance(error, CompanionError)

    def test_str_and_to_dict(self) -> None:
        cause = ValueError("boom")
        error = CompanionError(ErrorCode.CACHE_ERROR, "cache broke", ErrorContext(operation="put"), cause)

        assert str(error) == "CACHE_ERROR: cache broke"
        assert error.to_dict() == {
            "code": "CACHE_ERROR",
            "message": "cache broke",
            "context": {"operation": "put", "additional_data": {}},
            "original_error": "boom",
        }

    def test_fixed_codes(self) -> None:
        assert UpstreamError("x").code == ErrorCode.UPSTREAM_UNAVAILABLE
        assert ChainExhaustedError("x").code == ErrorCode.CHAIN_EXHAUSTED
        assert CacheOnlyStepError("k").context.cache_key == "k"


class TestFactories:
    def test_validation_error(self) -> None:
        error = create_validation_error("Missing q query parameter.", field="q", operation="search")

        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.context.additional_data == {"field": "q"}

    def test_origin_error_carries_status(self) -> None:
        error = create_origin_error(
            ErrorCode.ORIGIN_SERVER_ERROR,
            "SteamDB upstream error: 502",
            "https://steamdb.info/",
            status_code=502,
            retryable=True,
        )

        assert error.status_code == 502
        assert error.retryable is True
        assert error.to_dict()["status_code"] == 502
        assert error.context.additional_data == {"url": "https://steamdb.info/", "status_code": 502}
