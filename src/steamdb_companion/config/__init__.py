"""Configuration package."""

from .loader import SettingsLoader, load_settings
from .models import Settings

__all__ = ["Settings", "SettingsLoader", "load_settings"]
