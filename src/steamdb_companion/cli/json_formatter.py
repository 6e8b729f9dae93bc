"""JSON output for ``--json`` mode.

Every command answers with the same envelope so scripts can rely on one
shape: success flag, timestamp, command name, data, errors.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command succeeded
        command: The command name (e.g., "cache list")
        data: The command's output data
        errors: Error messages; any error forces ``success`` to False

    Returns:
        JSON-encoded bytes ready for output
    """
    errors = errors or []
    if errors:
        success = False

    envelope = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
    }

    try:
        return orjson.dumps(envelope, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)
    except TypeError as e:
        envelope["data"] = None
        envelope["success"] = False
        envelope["errors"] = [f"JSON serialization failed: {e!s}"]
        return orjson.dumps(envelope, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)
