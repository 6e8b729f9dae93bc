"""Snapshot and change record models."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from steamdb_companion.shared.models import GatewayApp


class ChangeKind(str, Enum):
    """What moved between two snapshots of one entity."""

    PRICE_DROP = "priceDrop"
    PRICE_RISE = "priceRise"
    METRIC_SPIKE = "metricSpike"
    METRIC_DROP = "metricDrop"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> ChangeKind:
        # Records written by a newer build may carry kinds this one lacks.
        return cls.UNKNOWN


class EntitySnapshot(BaseModel):
    """Observable numeric fields of one entity at one instant.

    Attributes:
        id: Entity id (the Steam app id)
        name: Display name
        price: Current price, if known
        activity_metric: Current player count, if known
        observed_at: When the snapshot was taken
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    price: float | None = None
    activity_metric: float | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("price", "activity_metric")
    @classmethod
    def drop_non_finite(cls, v: float | None) -> float | None:
        """NaN and infinite readings count as unknown."""
        if v is not None and not math.isfinite(v):
            return None
        return v

    @classmethod
    def from_app(cls, app: GatewayApp, observed_at: datetime | None = None) -> EntitySnapshot:
        return cls(
            id=app.id,
            name=app.name,
            price=app.current_price,
            activity_metric=app.current_players,
            observed_at=observed_at or datetime.now(timezone.utc),
        )


class ChangeRecord(BaseModel):
    """One detected change between a baseline and a current snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    entity_id: int
    kind: ChangeKind
    old_value: float = Field(allow_inf_nan=False)
    new_value: float = Field(allow_inf_nan=False)
    detected_at: datetime
