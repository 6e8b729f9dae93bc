"""SteamDB Companion.

Tiered caching and fallback data access for SteamDB: an edge gateway that
scrapes and caches SteamDB routes, and a client that walks fallback chains
over the gateway, SteamDB itself, the Steam store API and its own disk
cache, plus snapshot diffing for price and player alerts.
"""

from steamdb_companion.shared.constants import Application

__version__ = Application.VERSION

__all__ = ["__version__"]
