"""Tests for SnapshotDiffEngine."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import FakeClock, make_app
from steamdb_companion.services.alerts import ChangeKind, ChangeRecord, EntitySnapshot, SnapshotDiffEngine
from steamdb_companion.shared.errors import DomainError


def snap(entity_id: int, price: float | None = None, metric: float | None = None) -> EntitySnapshot:
    return EntitySnapshot(id=entity_id, name=f"App {entity_id}", price=price, activity_metric=metric)


@pytest.fixture
def engine(clock: FakeClock) -> SnapshotDiffEngine:
    return SnapshotDiffEngine(clock=clock)


class TestPriceChanges:
    def test_price_drop(self, engine: SnapshotDiffEngine, clock: FakeClock) -> None:
        records = engine.detect_diffs([snap(1, price=20.0)], [snap(1, price=15.0)])

        assert len(records) == 1
        record = records[0]
        assert record.kind is ChangeKind.PRICE_DROP
        assert (record.entity_id, record.old_value, record.new_value) == (1, 20.0, 15.0)
        assert record.detected_at == clock.now

    def test_price_rise(self, engine: SnapshotDiffEngine) -> None:
        records = engine.detect_diffs([snap(1, price=15.0)], [snap(1, price=20.0)])

        assert [r.kind for r in records] == [ChangeKind.PRICE_RISE]

    def test_unchanged_price_is_silent(self, engine: SnapshotDiffEngine) -> None:
        assert engine.detect_diffs([snap(1, price=9.99)], [snap(1, price=9.99)]) == []

    def test_unknown_price_on_either_side_is_silent(self, engine: SnapshotDiffEngine) -> None:
        assert engine.detect_diffs([snap(1)], [snap(1, price=5.0)]) == []
        assert engine.detect_diffs([snap(1, price=5.0)], [snap(1)]) == []

    def test_delta_must_exceed_threshold(self, clock: FakeClock) -> None:
        engine = SnapshotDiffEngine(price_change_threshold=1.0, clock=clock)

        assert engine.detect_diffs([snap(1, price=10.0)], [snap(1, price=9.0)]) == []
        assert len(engine.detect_diffs([snap(1, price=10.0)], [snap(1, price=8.5)])) == 1


class TestMetricChanges:
    def test_spike_at_thirty_percent(self, engine: SnapshotDiffEngine) -> None:
        records = engine.detect_diffs([snap(1, metric=100)], [snap(1, metric=130)])

        assert [r.kind for r in records] == [ChangeKind.METRIC_SPIKE]
        assert records[0].new_value == 130

    def test_drop(self, engine: SnapshotDiffEngine) -> None:
        records = engine.detect_diffs([snap(1, metric=100)], [snap(1, metric=50)])

        assert [r.kind for r in records] == [ChangeKind.METRIC_DROP]

    def test_fifteen_percent_is_below_threshold(self, engine: SnapshotDiffEngine) -> None:
        assert engine.detect_diffs([snap(1, metric=100)], [snap(1, metric=115)]) == []

    def test_threshold_is_inclusive(self, engine: SnapshotDiffEngine) -> None:
        assert len(engine.detect_diffs([snap(1, metric=100)], [snap(1, metric=120)])) == 1

    def test_zero_baseline_is_never_compared(self, engine: SnapshotDiffEngine) -> None:
        """Failure-First: no relative change can be computed from zero."""
        assert engine.detect_diffs([snap(1, metric=0)], [snap(1, metric=5000)]) == []


class TestDiffSemantics:
    def test_new_entity_produces_nothing(self, engine: SnapshotDiffEngine) -> None:
        assert engine.detect_diffs([snap(1, price=5.0)], [snap(2, price=1.0)]) == []

    def test_empty_inputs(self, engine: SnapshotDiffEngine) -> None:
        assert engine.detect_diffs([], []) == []
        assert engine.detect_diffs([snap(1, price=1.0)], []) == []

    def test_later_duplicate_is_the_baseline(self, engine: SnapshotDiffEngine) -> None:
        previous = [snap(1, price=30.0), snap(1, price=20.0)]

        records = engine.detect_diffs(previous, [snap(1, price=15.0)])

        assert records[0].old_value == 20.0

    def test_records_share_timestamp_in_reverse_detection_order(self, engine: SnapshotDiffEngine) -> None:
        previous = [snap(1, price=10.0, metric=100), snap(2, price=5.0)]
        current = [snap(1, price=8.0, metric=200), snap(2, price=6.0)]

        records = engine.detect_diffs(previous, current)

        assert [(r.entity_id, r.kind) for r in records] == [
            (2, ChangeKind.PRICE_RISE),
            (1, ChangeKind.METRIC_SPIKE),
            (1, ChangeKind.PRICE_DROP),
        ]
        assert len({r.detected_at for r in records}) == 1
        assert len({r.id for r in records}) == 3

    def test_both_changes_for_one_entity(self, engine: SnapshotDiffEngine) -> None:
        records = engine.detect_diffs([snap(7, price=10.0, metric=10)], [snap(7, price=5.0, metric=2)])

        assert {r.kind for r in records} == {ChangeKind.PRICE_DROP, ChangeKind.METRIC_DROP}

    @pytest.mark.parametrize(("price", "metric"), [(-0.01, 0.2), (0.0, 0.0), (0.0, -1.0)])
    def test_invalid_thresholds(self, price: float, metric: float) -> None:
        with pytest.raises(DomainError):
            SnapshotDiffEngine(price_change_threshold=price, metric_threshold=metric)


class TestModels:
    def test_snapshot_from_app(self) -> None:
        observed = datetime(2024, 5, 1, tzinfo=timezone.utc)
        app = make_app(620, "Portal 2", current_price=1.99, current_players=4200)

        snapshot = EntitySnapshot.from_app(app, observed)

        assert snapshot == EntitySnapshot(id=620, name="Portal 2", price=1.99, activity_metric=4200, observed_at=observed)

    def test_unknown_change_kind_reads_as_unknown(self) -> None:
        record = ChangeRecord.model_validate(
            {
                "entity_id": 1,
                "kind": "bundleAdded",
                "old_value": 0,
                "new_value": 1,
                "detected_at": "2024-01-01T00:00:00Z",
            }
        )

        assert record.kind is ChangeKind.UNKNOWN

    @pytest.mark.parametrize("reading", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_readings_are_unknown(self, reading: float) -> None:
        snapshot = EntitySnapshot(id=1, price=reading, activity_metric=reading)

        assert snapshot.price is None
        assert snapshot.activity_metric is None

    def test_change_record_rejects_non_finite_values(self) -> None:
        with pytest.raises(ValidationError):
            ChangeRecord(
                entity_id=1,
                kind=ChangeKind.PRICE_RISE,
                old_value=1.0,
                new_value=float("nan"),
                detected_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )


def test_non_finite_price_emits_nothing(engine: SnapshotDiffEngine) -> None:
    records = engine.detect_diffs([snap(1, price=10.0, metric=100)], [snap(1, price=float("nan"), metric=float("inf"))])

    assert records == []
