"""
SteamDB Companion Typer CLI Application

Maintenance commands for the caches and the change alert history of
both tiers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from steamdb_companion import __version__
from steamdb_companion.config.loader import SettingsLoader
from steamdb_companion.shared.constants import Application, Logging
from steamdb_companion.shared.logging import setup_structured_logger

from .commands import alerts_app, cache_app
from .context import CliContext, console, emit, fail

app = typer.Typer(
    name=Application.NAME,
    help="SteamDB Companion cache and alert maintenance.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
app.add_typer(cache_app, name="cache")
app.add_typer(alerts_app, name="alerts")


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{Application.NAME} {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
        dir_okay=False,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help=f"Override the configured log level ({', '.join(Logging.LEVELS)})",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Load settings and configure logging before any command runs."""
    try:
        settings = SettingsLoader(config).get_config()
        level = (log_level or settings.logging.level).upper()
        if level not in Logging.LEVELS:
            raise typer.BadParameter(f"Invalid log level: {log_level}", param_hint="--log-level")
        setup_structured_logger(
            level=level,
            log_file=settings.logging.file,
            use_rich_console=settings.logging.use_rich_console,
        )
    except typer.BadParameter:
        raise
    except Exception as e:  # noqa: BLE001
        fail("startup", e, json_output=json_output)

    ctx.obj = CliContext(settings=settings, json_output=json_output)


@app.command("version")
def version_command(ctx: typer.Context) -> None:
    """Show the version."""
    state = ctx.find_root().obj
    if state is not None and state.json_output:
        emit("version", {"name": Application.NAME, "version": __version__})
    else:
        console.print(f"{Application.NAME} {__version__}")


if __name__ == "__main__":
    app()
