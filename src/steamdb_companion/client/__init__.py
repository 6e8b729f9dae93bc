"""Client tier."""

from .data_source import CompanionDataSource

__all__ = ["CompanionDataSource"]
