"""Edge gateway tier."""

from .edge import EdgeGateway
from .watchlist import WatchlistStore, normalize_app_ids, sanitize_installation_id

__all__ = ["EdgeGateway", "WatchlistStore", "normalize_app_ids", "sanitize_installation_id"]
