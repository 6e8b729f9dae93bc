"""Application and logging configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from steamdb_companion.shared.constants import Application, FileSystem, Logging


class AppSettings(BaseModel):
    """Application configuration.

    ``state_dir`` is the base directory for every persisted file: cache
    databases, the client's disk cache and the alert state.
    """

    name: str = Field(default=Application.NAME, description="Application name")
    version: str = Field(default=Application.VERSION, description="Application version")
    state_dir: Path = Field(
        default=FileSystem.DEFAULT_STATE_DIR,
        description="Directory holding caches and alert state",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default=Logging.DEFAULT_LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    use_rich_console: bool = Field(
        default=True,
        description="Render console logs with rich instead of JSON lines",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in Logging.LEVELS:
            msg = f"Invalid log level: {value}. Must be one of {Logging.LEVELS}"
            raise ValueError(msg)
        return upper


__all__ = ["AppSettings", "LoggingSettings"]
