"""Snapshot diffing and change alerts."""

from .alert_engine import AlertEngine
from .diff_engine import SnapshotDiffEngine
from .models import ChangeKind, ChangeRecord, EntitySnapshot
from .state_store import AlertStateStore

__all__ = [
    "AlertEngine",
    "AlertStateStore",
    "ChangeKind",
    "ChangeRecord",
    "EntitySnapshot",
    "SnapshotDiffEngine",
]
