"""Change alert history commands."""

from __future__ import annotations

import typer
from dependency_injector import providers
from rich.table import Table

from steamdb_companion.config.models import Settings
from steamdb_companion.containers import ClientContainer
from steamdb_companion.services.alerts import AlertEngine

from ..context import console, emit, fail, get_cli_context

alerts_app = typer.Typer(help="Show and clear detected price and player changes.", no_args_is_help=True)


def open_alert_engine(settings: Settings) -> AlertEngine:
    container = ClientContainer(settings=providers.Object(settings))
    return container.alert_engine()


@alerts_app.command("history")
def history_command(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Newest records to show"),
) -> None:
    """Show the most recent change records."""
    state = get_cli_context(ctx)
    try:
        records = open_alert_engine(state.settings).history[:limit]
    except Exception as e:  # noqa: BLE001
        fail("alerts history", e, json_output=state.json_output)

    if state.json_output:
        emit("alerts history", [record.model_dump(mode="json") for record in records])
        return

    if not records:
        console.print("[yellow]No changes recorded yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Detected", style="cyan")
    table.add_column("App", justify="right")
    table.add_column("Kind", style="green")
    table.add_column("Old", justify="right")
    table.add_column("New", justify="right")
    for record in records:
        table.add_row(
            record.detected_at.isoformat(timespec="seconds"),
            str(record.entity_id),
            record.kind.value,
            f"{record.old_value:g}",
            f"{record.new_value:g}",
        )
    console.print(table)


@alerts_app.command("clear")
def clear_command(ctx: typer.Context) -> None:
    """Forget every recorded change. The snapshot baseline is kept."""
    state = get_cli_context(ctx)
    try:
        open_alert_engine(state.settings).clear_history()
    except Exception as e:  # noqa: BLE001
        fail("alerts clear", e, json_output=state.json_output)

    if state.json_output:
        emit("alerts clear", {"cleared": True})
    else:
        console.print("[green]Alert history cleared[/green]")
