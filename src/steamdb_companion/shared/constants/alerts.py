"""Snapshot diff and alert history constants."""


class AlertConfig:
    """Thresholds and persistence defaults for change alerts."""

    PRICE_CHANGE_THRESHOLD = 0.0  # absolute; any non-zero delta
    METRIC_THRESHOLD = 0.2  # relative
    HISTORY_LIMIT = 300

    HISTORY_FILE = "alert_history.json"
    BASELINE_FILE = "snapshot_baseline.json"
    STATE_DIRECTORY = "alerts"
