"""Durable alert state: change history and the snapshot baseline."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import orjson
from pydantic import TypeAdapter, ValidationError

from steamdb_companion.shared.constants import AlertConfig
from steamdb_companion.shared.errors import ErrorCode, ErrorContext, InfrastructureError
from steamdb_companion.shared.logging import log_operation_error

from .models import ChangeRecord, EntitySnapshot

logger = logging.getLogger(__name__)

_HISTORY = TypeAdapter(list[ChangeRecord])
_BASELINE = TypeAdapter(list[EntitySnapshot])


class AlertStateStore:
    """Two orjson files under one directory.

    Args:
        state_dir: Directory holding the files (created on first write)
        history_file: File name of the change history
        baseline_file: File name of the snapshot baseline
    """

    def __init__(
        self,
        state_dir: Path | str,
        history_file: str = AlertConfig.HISTORY_FILE,
        baseline_file: str = AlertConfig.BASELINE_FILE,
    ) -> None:
        self.state_dir = Path(state_dir)
        self.history_path = self.state_dir / history_file
        self.baseline_path = self.state_dir / baseline_file

    def load_history(self) -> list[ChangeRecord]:
        return self._load(self.history_path, _HISTORY)

    def save_history(self, records: list[ChangeRecord]) -> None:
        self._save(self.history_path, _HISTORY.dump_python(records, mode="json"))

    def clear_history(self) -> None:
        try:
            self.history_path.unlink(missing_ok=True)
        except OSError as e:
            raise self._write_error(self.history_path, e) from e

    def load_baseline(self) -> list[EntitySnapshot]:
        return self._load(self.baseline_path, _BASELINE)

    def save_baseline(self, snapshots: list[EntitySnapshot]) -> None:
        self._save(self.baseline_path, _BASELINE.dump_python(snapshots, mode="json"))

    def _load(self, path: Path, adapter: TypeAdapter[Any]) -> list[Any]:
        if not path.exists():
            return []
        try:
            return adapter.validate_python(orjson.loads(path.read_bytes()))
        except (OSError, orjson.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable alert state file %s: %s", path, e)
            return []

    def _save(self, path: Path, data: Any) -> None:
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.state_dir, prefix=f".{path.stem}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as tmp_file:
                    tmp_file.write(orjson.dumps(data))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise self._write_error(path, e) from e

    @staticmethod
    def _write_error(path: Path, cause: OSError) -> InfrastructureError:
        error = InfrastructureError(
            code=ErrorCode.ALERT_STATE_WRITE_FAILED,
            message=f"Failed to write alert state: {cause!s}",
            context=ErrorContext(
                operation="save_alert_state",
                additional_data={"path": str(path)},
            ),
            original_error=cause,
        )
        log_operation_error(logger=logger, error=error, operation="save_alert_state")
        return error
