"""Cache inspection commands for both tiers."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import typer
from rich.table import Table

from steamdb_companion.config.models import Settings
from steamdb_companion.services.cache import KeyedCacheStore, create_cache_store

from ..context import console, emit, fail, get_cli_context

cache_app = typer.Typer(help="Inspect and clear the edge and client caches.", no_args_is_help=True)


class Tier(str, Enum):
    EDGE = "edge"
    CLIENT = "client"


tier_option = typer.Option(Tier.CLIENT, "--tier", "-t", help="Which tier's cache to open")


def open_store(settings: Settings, tier: Tier) -> KeyedCacheStore:
    if tier is Tier.EDGE:
        return create_cache_store(settings.cache.edge_backend, settings.resolve_path(settings.cache.edge_path))
    return create_cache_store(settings.cache.client_backend, settings.resolve_path(settings.cache.client_path))


async def _list_records(store: KeyedCacheStore) -> list[dict[str, Any]]:
    now = datetime.now(timezone.utc)
    rows = []
    for key in await store.keys():
        record = await store.inspect(key)
        if record is not None:
            rows.append({"key": key, "written_at": record.written_at.isoformat(), "age": round(record.age(now), 1)})
    return rows


@cache_app.command("list")
def list_command(ctx: typer.Context, tier: Tier = tier_option) -> None:
    """List every cached key with its age."""
    state = get_cli_context(ctx)
    store = None
    try:
        store = open_store(state.settings, tier)
        rows = asyncio.run(_list_records(store))
    except Exception as e:  # noqa: BLE001
        fail("cache list", e, json_output=state.json_output)
    finally:
        if store is not None:
            store.close()

    if state.json_output:
        emit("cache list", {"tier": tier.value, "records": rows})
        return

    table = Table(title=f"{tier.value} cache", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Written", style="green")
    table.add_column("Age (s)", justify="right")
    for row in rows:
        table.add_row(row["key"], row["written_at"], f"{row['age']:.0f}")
    console.print(table)


@cache_app.command("stats")
def stats_command(ctx: typer.Context, tier: Tier = tier_option) -> None:
    """Show the backend, location and record count of a tier's cache."""
    state = get_cli_context(ctx)
    settings = state.settings
    store = None
    try:
        store = open_store(settings, tier)
        count = len(asyncio.run(store.keys()))
    except Exception as e:  # noqa: BLE001
        fail("cache stats", e, json_output=state.json_output)
    finally:
        if store is not None:
            store.close()

    path = settings.cache.edge_path if tier is Tier.EDGE else settings.cache.client_path
    stats = {
        "tier": tier.value,
        "backend": store.backend_name,
        "location": str(settings.resolve_path(path)),
        "records": count,
    }

    if state.json_output:
        emit("cache stats", stats)
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in stats.items():
        table.add_row(name.title(), str(value))
    console.print(table)


@cache_app.command("show")
def show_command(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key to print"),
    tier: Tier = tier_option,
) -> None:
    """Print one cached record."""
    state = get_cli_context(ctx)
    store = None
    try:
        store = open_store(state.settings, tier)
        record = asyncio.run(store.inspect(key))
    except Exception as e:  # noqa: BLE001
        fail("cache show", e, json_output=state.json_output)
    finally:
        if store is not None:
            store.close()

    if record is None:
        if state.json_output:
            emit("cache show", None)
        else:
            console.print(f"[yellow]No record for '{key}'[/yellow]")
        raise typer.Exit(1)

    data = {"key": record.key, "written_at": record.written_at.isoformat(), "value": record.value}
    if state.json_output:
        emit("cache show", data)
        return

    console.print(f"[cyan]{record.key}[/cyan] written {record.written_at.isoformat()}")
    console.print_json(data=record.value)


@cache_app.command("clear")
def clear_command(
    ctx: typer.Context,
    tier: Tier = tier_option,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every record in a tier's cache."""
    state = get_cli_context(ctx)
    if not yes and not state.json_output:
        typer.confirm(f"Clear the {tier.value} cache?", abort=True)

    store = None
    try:
        store = open_store(state.settings, tier)
        asyncio.run(store.clear())
    except Exception as e:  # noqa: BLE001
        fail("cache clear", e, json_output=state.json_output)
    finally:
        if store is not None:
            store.close()

    if state.json_output:
        emit("cache clear", {"tier": tier.value})
    else:
        console.print(f"[green]{tier.value} cache cleared[/green]")
