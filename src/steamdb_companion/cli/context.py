"""CLI context and error handling shared by all commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, NoReturn

import typer
from rich.console import Console

from steamdb_companion.config.models import Settings
from steamdb_companion.shared.errors import CompanionError, ErrorCode

from .json_formatter import format_json_output

logger = logging.getLogger(__name__)

console = Console()


@dataclass
class CliContext:
    """State the root callback hands to every command."""

    settings: Settings
    json_output: bool = False


def get_cli_context(ctx: typer.Context) -> CliContext:
    state = ctx.find_root().obj
    if not isinstance(state, CliContext):
        msg = "CLI context is not initialized"
        raise RuntimeError(msg)
    return state


def emit(command: str, data: Any) -> None:
    """Print ``data`` as a JSON envelope (``--json`` mode only)."""
    typer.echo(format_json_output(success=True, command=command, data=data).decode("utf-8"))


def fail(command: str, error: Exception, *, json_output: bool) -> NoReturn:
    """Report ``error`` and exit with status 1."""
    if isinstance(error, CompanionError):
        code = error.code
        message = error.message
        logger.error("Command '%s' failed: %s", command, message, extra={"error_code": code.name})
    else:
        code = ErrorCode.CLI_UNEXPECTED_ERROR
        message = str(error)
        logger.exception("Command '%s' failed unexpectedly", command)

    if json_output:
        typer.echo(format_json_output(success=False, command=command, errors=[f"{code.value}: {message}"]).decode("utf-8"))
    else:
        console.print(f"[red]{command} failed:[/red] {message}")
    raise typer.Exit(1) from error
