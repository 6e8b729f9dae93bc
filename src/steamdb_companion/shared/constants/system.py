"""Application-level constants."""

from pathlib import Path


class Application:
    """Application identity."""

    NAME = "steamdb-companion"
    VERSION = "0.1.0"


class FileSystem:
    """Default locations for persisted state."""

    HOME_DIR = ".steamdb_companion"
    DEFAULT_STATE_DIR = Path.home() / HOME_DIR
    CONFIG_FILE = "config.toml"
    ENV_FILE = ".env"


class Logging:
    """Logging defaults."""

    DEFAULT_LEVEL = "INFO"
    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
