"""SteamDB Companion Error Handling Module

This module defines the error handling system for SteamDB Companion, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("installation_id",)


class ErrorCode(str, Enum):
    """Error codes for SteamDB Companion.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # File System Errors
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    FILE_PERMISSION_DENIED = "FILE_PERMISSION_DENIED"

    # Origin (remote) Errors
    ORIGIN_REQUEST_FAILED = "ORIGIN_REQUEST_FAILED"
    ORIGIN_CONNECTION_ERROR = "ORIGIN_CONNECTION_ERROR"
    ORIGIN_TIMEOUT = "ORIGIN_TIMEOUT"
    ORIGIN_RATE_LIMITED = "ORIGIN_RATE_LIMITED"
    ORIGIN_SERVER_ERROR = "ORIGIN_SERVER_ERROR"
    ORIGIN_INVALID_RESPONSE = "ORIGIN_INVALID_RESPONSE"

    # Fetch / Fallback Errors
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    CHAIN_EXHAUSTED = "CHAIN_EXHAUSTED"
    CACHE_ONLY_STEP = "CACHE_ONLY_STEP"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Cache Errors
    CACHE_ERROR = "CACHE_ERROR"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    CACHE_CORRUPTED = "CACHE_CORRUPTED"
    CACHE_SERIALIZATION_ERROR = "CACHE_SERIALIZATION_ERROR"
    CACHE_INITIALIZATION_FAILED = "CACHE_INITIALIZATION_FAILED"

    # Alert State Errors
    ALERT_STATE_WRITE_FAILED = "ALERT_STATE_WRITE_FAILED"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Rate Limiting Errors
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"

    # Application / CLI Errors
    APPLICATION_ERROR = "APPLICATION_ERROR"
    CLI_COMMAND_FAILED = "CLI_COMMAND_FAILED"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so that contexts always serialize into log records.

    Attributes:
        operation: Optional operation name that caused the error
        cache_key: Optional cache key the operation was working on
        installation_id: Optional client installation id (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    cache_key: str | None = None
    installation_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with sensitive fields masked.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked fields and a guaranteed additional_data key.

        Example:
            >>> ErrorContext(operation="fetch", installation_id="abc").safe_dict()
            {'operation': 'fetch', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.cache_key is not None and "cache_key" not in mask_keys:
            data["cache_key"] = self.cache_key
        if self.installation_id is not None and "installation_id" not in mask_keys:
            data["installation_id"] = self.installation_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


class CompanionError(Exception):
    """Base exception class for all SteamDB Companion errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        """Initialize CompanionError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(CompanionError):
    """Domain-specific errors.

    Raised when a request violates domain rules: unknown collection
    kinds, blank search queries, non-positive app ids, chains that
    yield nothing at all.
    """


class InfrastructureError(CompanionError):
    """Infrastructure-related errors.

    Raised when talking to external systems: the origin site, the
    edge gateway, the Steam store API, SQLite or the file system.
    """


class ApplicationError(CompanionError):
    """Application-level errors (configuration, CLI, wiring)."""


class OriginError(InfrastructureError):
    """A single remote call failed.

    Carries the HTTP status (when one was received) and whether the
    failure is worth retrying with backoff.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: BaseException | None = None,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status_code = status_code
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class UpstreamError(InfrastructureError):
    """The producer failed and no cache record existed for the key."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(ErrorCode.UPSTREAM_UNAVAILABLE, message, context, original_error)


class ChainExhaustedError(DomainError):
    """Every step of a single-entity chain came back empty."""

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        super().__init__(ErrorCode.CHAIN_EXHAUSTED, message, context)


class CacheOnlyStepError(DomainError):
    """Raised by the producer of a cache-only fallback step."""

    def __init__(self, cache_key: str) -> None:
        super().__init__(
            ErrorCode.CACHE_ONLY_STEP,
            f"Step for '{cache_key}' never calls the origin",
            ErrorContext(operation="cache_only_step", cache_key=cache_key),
        )


# Convenience functions for common error scenarios
def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DomainError:
    """Create a validation error with context."""
    additional_data = {"field": field} if field else None
    context = ErrorContext(operation=operation, additional_data=additional_data)
    return DomainError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_config_error(
    message: str,
    config_path: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data = {"config_path": config_path} if config_path else None
    context = ErrorContext(operation=operation, additional_data=additional_data)
    return ApplicationError(
        ErrorCode.CONFIGURATION_ERROR,
        message,
        context,
        original_error,
    )


def create_origin_error(
    code: ErrorCode,
    message: str,
    url: str,
    *,
    status_code: int | None = None,
    retryable: bool = False,
    original_error: Exception | None = None,
) -> OriginError:
    """Create an origin error carrying the request URL and HTTP status."""
    additional_data: dict[str, PrimitiveContextValue] = {"url": url}
    if status_code is not None:
        additional_data["status_code"] = status_code
    context = ErrorContext(operation="origin_request", additional_data=additional_data)
    return OriginError(
        code,
        message,
        context,
        original_error,
        status_code=status_code,
        retryable=retryable,
    )
