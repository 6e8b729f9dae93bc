"""Result types for fetch orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class Freshness(str, Enum):
    """Whether a value came from a live call or may be out of date."""

    FRESH = "fresh"
    STALE = "stale"


class DataSource(str, Enum):
    REMOTE = "remote"
    CACHE = "cache"


@dataclass(frozen=True)
class FreshnessResult(Generic[T]):
    """A value tagged with how fresh it is and where it came from.

    A remote value is always fresh.

    Attributes:
        value: The payload
        freshness: fresh or stale
        source: remote or cache
        age: Age in seconds of the cache record served, None for remote values
    """

    value: T
    freshness: Freshness
    source: DataSource
    age: float | None = None

    def __post_init__(self) -> None:
        if self.source is DataSource.REMOTE and self.freshness is not Freshness.FRESH:
            msg = "A remote result must be fresh"
            raise ValueError(msg)

    @property
    def is_stale(self) -> bool:
        return self.freshness is Freshness.STALE


@dataclass(frozen=True)
class ChainResult(FreshnessResult[T]):
    """Outcome of a fallback chain walk.

    Attributes:
        step_name: Label of the step that answered, None when none did
        exhausted: True when every step failed or came back empty
    """

    step_name: str | None = None
    exhausted: bool = False
