"""Snapshot diff engine.

Compares two sets of entity snapshots and emits a change record for every
price move and every activity swing that crosses its threshold.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Callable

from steamdb_companion.shared.constants import AlertConfig
from steamdb_companion.shared.errors import create_validation_error

from .models import ChangeKind, ChangeRecord, EntitySnapshot

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotDiffEngine:
    """Pure diff between a baseline and a current snapshot set.

    Args:
        price_change_threshold: Absolute price delta that must be exceeded
            (0 reports any change)
        metric_threshold: Relative activity delta that must be reached
        clock: Returns the timestamp stamped on every record of one call
    """

    def __init__(
        self,
        price_change_threshold: float = AlertConfig.PRICE_CHANGE_THRESHOLD,
        metric_threshold: float = AlertConfig.METRIC_THRESHOLD,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if price_change_threshold < 0:
            raise create_validation_error(
                f"Price change threshold must not be negative, got: {price_change_threshold}",
                field="price_change_threshold",
                operation="diff_engine_init",
            )
        if metric_threshold <= 0:
            raise create_validation_error(
                f"Metric threshold must be positive, got: {metric_threshold}",
                field="metric_threshold",
                operation="diff_engine_init",
            )
        self.price_change_threshold = price_change_threshold
        self.metric_threshold = metric_threshold
        self._clock = clock

    def detect_diffs(
        self,
        previous: Iterable[EntitySnapshot],
        current: Iterable[EntitySnapshot],
    ) -> list[ChangeRecord]:
        """Change records for every entity present in both sets.

        Entities only in ``current`` are new and produce nothing. When
        ``previous`` lists an id twice, the later snapshot is the baseline.

        Returns:
            Records sorted newest first; records sharing a timestamp come
            out in reverse order of detection
        """
        baseline = {snapshot.id: snapshot for snapshot in previous}
        detected_at = self._clock()
        records: list[ChangeRecord] = []

        for snapshot in current:
            old = baseline.get(snapshot.id)
            if old is None:
                continue

            price_record = self._price_change(old, snapshot, detected_at)
            if price_record is not None:
                records.append(price_record)

            metric_record = self._metric_change(old, snapshot, detected_at)
            if metric_record is not None:
                records.append(metric_record)

        if records:
            logger.debug("Detected %d changes across %d baseline entities", len(records), len(baseline))
        return sorted(reversed(records), key=lambda record: record.detected_at, reverse=True)

    def _price_change(
        self,
        old: EntitySnapshot,
        new: EntitySnapshot,
        detected_at: datetime,
    ) -> ChangeRecord | None:
        if old.price is None or new.price is None:
            return None
        if abs(new.price - old.price) <= self.price_change_threshold:
            return None

        kind = ChangeKind.PRICE_DROP if new.price < old.price else ChangeKind.PRICE_RISE
        return ChangeRecord(
            entity_id=new.id,
            kind=kind,
            old_value=old.price,
            new_value=new.price,
            detected_at=detected_at,
        )

    def _metric_change(
        self,
        old: EntitySnapshot,
        new: EntitySnapshot,
        detected_at: datetime,
    ) -> ChangeRecord | None:
        if old.activity_metric is None or new.activity_metric is None:
            return None
        if old.activity_metric <= 0:
            return None

        relative = abs(new.activity_metric - old.activity_metric) / old.activity_metric
        if relative < self.metric_threshold:
            return None

        kind = ChangeKind.METRIC_SPIKE if new.activity_metric > old.activity_metric else ChangeKind.METRIC_DROP
        return ChangeRecord(
            entity_id=new.id,
            kind=kind,
            old_value=old.activity_metric,
            new_value=new.activity_metric,
            detected_at=detected_at,
        )
