"""In-app alert engine.

Keeps a baseline of the last snapshots it was fed and a capped, persisted
history of the changes found between consecutive refreshes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from steamdb_companion.shared.constants import AlertConfig
from steamdb_companion.shared.models import GatewayApp

from .diff_engine import SnapshotDiffEngine
from .models import ChangeRecord, EntitySnapshot
from .state_store import AlertStateStore

logger = logging.getLogger(__name__)


class AlertEngine:
    """Diffs each refresh against the previous one and records the changes.

    Args:
        diff_engine: Decides what counts as a change
        state_store: Persists history and baseline
        history_limit: Maximum records kept; the oldest are dropped first
    """

    def __init__(
        self,
        diff_engine: SnapshotDiffEngine,
        state_store: AlertStateStore,
        history_limit: int = AlertConfig.HISTORY_LIMIT,
    ) -> None:
        self.diff_engine = diff_engine
        self.state_store = state_store
        self.history_limit = history_limit
        self._history: list[ChangeRecord] = state_store.load_history()[:history_limit]
        self._latest: list[ChangeRecord] = []

    @property
    def history(self) -> list[ChangeRecord]:
        """All kept records, newest first."""
        return list(self._history)

    @property
    def latest(self) -> list[ChangeRecord]:
        """Records found by the most recent refresh."""
        return list(self._latest)

    def refresh(self, snapshots: Sequence[EntitySnapshot]) -> list[ChangeRecord]:
        """Diff ``snapshots`` against the stored baseline, then make them the baseline.

        Raises:
            InfrastructureError: If the history or baseline cannot be written
        """
        current = list(snapshots)
        previous = self.state_store.load_baseline()
        changes = self.diff_engine.detect_diffs(previous, current)

        self._latest = changes
        if changes:
            self._history = (changes + self._history)[: self.history_limit]
            self.state_store.save_history(self._history)
            logger.info("Recorded %d changes (history %d)", len(changes), len(self._history))

        self.state_store.save_baseline(current)
        return list(changes)

    def refresh_from_apps(self, apps: Iterable[GatewayApp]) -> list[ChangeRecord]:
        return self.refresh([EntitySnapshot.from_app(app) for app in apps])

    def clear_history(self) -> None:
        """Forget every record. The baseline is kept."""
        self._history = []
        self._latest = []
        self.state_store.clear_history()
