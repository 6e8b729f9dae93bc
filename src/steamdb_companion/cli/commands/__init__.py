"""CLI sub-commands."""

from .alerts import alerts_app
from .cache import cache_app

__all__ = ["alerts_app", "cache_app"]
