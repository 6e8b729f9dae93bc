"""Settings loader.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- A thread-safe cached Settings instance for the CLI

Library code never reaches for the cached instance; containers receive
their Settings explicitly.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from steamdb_companion.config.models.settings import Settings
from steamdb_companion.shared.constants import FileSystem
from steamdb_companion.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)

logger = logging.getLogger(__name__)


class SettingsLoader:
    """Thread-safe holder for a lazily loaded Settings instance.

    Uses double-checked locking so concurrent first calls load once.
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = config_path
        self._instance: Settings | None = None
        self._lock = threading.RLock()

    def get_config(self) -> Settings:
        """Return the cached settings, loading them on first use."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings(self._config_path)

        return self._instance

    def reload_config(self) -> Settings:
        """Drop the cached settings and load them again."""
        with self._lock:
            self._instance = load_settings(self._config_path)

        return self._instance


def _load_env_file(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file if one exists.

    Values already present in the environment win over the file.

    Returns:
        True if a file was loaded

    Raises:
        InfrastructureError: If the file exists but cannot be read
    """
    env_file = env_file or Path(FileSystem.ENV_FILE)
    if not env_file.exists():
        return False

    try:
        load_dotenv(env_file, override=False)
    except PermissionError as e:
        raise InfrastructureError(
            code=ErrorCode.FILE_PERMISSION_DENIED,
            message=f"Permission denied reading .env file: {env_file}",
            context=ErrorContext(
                operation="load_env",
                additional_data={"file_name": env_file.name},
            ),
            original_error=e,
        ) from e
    except (OSError, ValueError) as e:
        raise InfrastructureError(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"Failed to read .env file: {e}",
            context=ErrorContext(
                operation="load_env",
                additional_data={"file_name": env_file.name},
            ),
            original_error=e,
        ) from e

    logger.debug("Loaded environment from %s", env_file)
    return True


def _default_config_paths() -> list[Path]:
    return [
        Path("config") / FileSystem.CONFIG_FILE,
        Path(FileSystem.CONFIG_FILE),
        FileSystem.DEFAULT_STATE_DIR / FileSystem.CONFIG_FILE,
    ]


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML file and the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are tried, then environment variables alone.

    Returns:
        A new Settings instance

    Raises:
        ApplicationError: If the file is missing or the values are invalid
    """
    _load_env_file()

    candidates = [Path(config_path)] if config_path else _default_config_paths()
    context = ErrorContext(
        operation="load_settings",
        additional_data={"config_path": str(config_path) if config_path else ""},
    )

    try:
        for path in candidates:
            if path.exists():
                logger.debug("Loading settings from %s", path)
                return Settings.from_toml_file(path)

        if config_path:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        return Settings()

    except FileNotFoundError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_MISSING,
            message=str(e),
            context=context,
            original_error=e,
        ) from e
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid configuration: {e.error_count()} error(s)",
            context=context,
            original_error=e,
        ) from e
    except toml.TomlDecodeError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Malformed configuration file: {e}",
            context=context,
            original_error=e,
        ) from e
