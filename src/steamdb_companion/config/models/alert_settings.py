"""Change alert configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from steamdb_companion.shared.constants import AlertConfig


class AlertSettings(BaseModel):
    """Snapshot diff thresholds and history retention."""

    price_change_threshold: float = Field(
        default=AlertConfig.PRICE_CHANGE_THRESHOLD,
        ge=0,
        description="Absolute price change that triggers an alert (0 = any change)",
    )
    metric_threshold: float = Field(
        default=AlertConfig.METRIC_THRESHOLD,
        gt=0,
        description="Relative activity change that triggers an alert",
    )
    history_limit: int = Field(
        default=AlertConfig.HISTORY_LIMIT,
        gt=0,
        description="Maximum number of change records kept",
    )
    state_path: Path = Field(
        default=Path(AlertConfig.STATE_DIRECTORY),
        description="Alert state directory, relative to app.state_dir",
    )


__all__ = ["AlertSettings"]
