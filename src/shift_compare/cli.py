"""Typer CLI for shift comparison.

Commands:
  compare   Compare a machine's current shift with the previous one, hour by hour
  windows   Show the default current and previous shift windows
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table
from whenever import Instant

from shift_compare.client import HistoryClient
from shift_compare.config import ShiftCompareConfig
from shift_compare.errors import ShiftComparisonError
from shift_compare.models import ShiftHourPoint, ShiftWindow
from shift_compare.service import compare_shifts
from shift_compare.shifts import format_shift_label, resolve_shift_windows

app = typer.Typer(
    name="shift-compare",
    help="Hour-by-hour comparison of a machine's current and previous production shift",
    no_args_is_help=True,
)
console = Console()

_POINTS_ADAPTER = TypeAdapter(list[ShiftHourPoint])


def _load_config(tz: str | None) -> ShiftCompareConfig:
    try:
        config = ShiftCompareConfig() if tz is None else ShiftCompareConfig(timezone=tz)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1) from None
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return config


async def _run_comparison(
    config: ShiftCompareConfig,
    machine_id: int,
    current: ShiftWindow,
    previous: ShiftWindow,
) -> list[ShiftHourPoint]:
    async with HistoryClient.from_config(config) as client:
        return await compare_shifts(client, machine_id, current, previous, tz=config.timezone)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _comparison_table(points: list[ShiftHourPoint]) -> Table:
    table = Table(title="Current vs Previous Shift")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Hour", style="cyan")
    table.add_column("Good", justify="right", style="green")
    table.add_column("Good (prev)", justify="right")
    table.add_column("Reject", justify="right", style="red")
    table.add_column("Reject (prev)", justify="right")
    table.add_column("Downtime", justify="right", style="yellow")
    table.add_column("Downtime (prev)", justify="right")

    for p in points:
        table.add_row(
            str(p.hour_index),
            p.hour_label,
            _fmt(p.current_good),
            _fmt(p.previous_good),
            _fmt(p.current_reject),
            _fmt(p.previous_reject),
            _fmt(p.current_downtime),
            _fmt(p.previous_downtime),
        )
    return table


@app.command()
def compare(
    machine_id: Annotated[int, typer.Argument(help="Machine ID")],
    current_start: Annotated[
        str | None, typer.Option("--current-start", help="Current shift start (ISO 8601)")
    ] = None,
    current_end: Annotated[
        str | None, typer.Option("--current-end", help="Current shift end (ISO 8601)")
    ] = None,
    previous_start: Annotated[
        str | None, typer.Option("--previous-start", help="Previous shift start (ISO 8601)")
    ] = None,
    previous_end: Annotated[
        str | None, typer.Option("--previous-end", help="Previous shift end (ISO 8601)")
    ] = None,
    current_filter: Annotated[
        str | None, typer.Option("--current-filter", help="Server-side filter, current shift")
    ] = None,
    previous_filter: Annotated[
        str | None, typer.Option("--previous-filter", help="Server-side filter, previous shift")
    ] = None,
    dim: Annotated[
        list[str] | None, typer.Option("--dim", "-d", help="Dimension filter (repeatable)")
    ] = None,
    tz: Annotated[
        str | None, typer.Option("--tz", help="IANA time zone for hour buckets and labels")
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text or json")
    ] = "text",
) -> None:
    """Compare a machine's current shift with the previous one, hour by hour."""
    config = _load_config(tz)

    try:
        current, previous = resolve_shift_windows(
            Instant.now(),
            config.timezone,
            current_start=current_start,
            current_end=current_end,
            previous_start=previous_start,
            previous_end=previous_end,
            current_filter=current_filter,
            previous_filter=previous_filter,
            dims=dim,
            start_hour=config.shift_start_hour,
            end_hour=config.shift_end_hour,
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    try:
        points = asyncio.run(_run_comparison(config, machine_id, current, previous))
    except ShiftComparisonError as e:
        console.print(f"[red]Shift comparison failed: {e}[/red]")
        raise typer.Exit(1) from None

    if format == "json":
        console.print(_POINTS_ADAPTER.dump_json(points, by_alias=True, indent=2).decode())
        return

    console.print(f"[bold]Machine:[/bold] {machine_id}")
    console.print(f"[bold]Current shift:[/bold] {format_shift_label(current, config.timezone)}")
    console.print(f"[bold]Previous shift:[/bold] {format_shift_label(previous, config.timezone)}")
    console.print()
    if not points:
        console.print("[dim]No production data for either shift.[/dim]")
        return
    console.print(_comparison_table(points))


@app.command()
def windows(
    tz: Annotated[
        str | None, typer.Option("--tz", help="IANA time zone for the shift calendar")
    ] = None,
) -> None:
    """Show the default current and previous shift windows."""
    config = _load_config(tz)
    current, previous = resolve_shift_windows(
        Instant.now(),
        config.timezone,
        start_hour=config.shift_start_hour,
        end_hour=config.shift_end_hour,
    )

    table = Table(title=f"Default Shifts ({config.timezone})")
    table.add_column("Shift", style="cyan")
    table.add_column("Label")
    table.add_column("Start (UTC)", style="green")
    table.add_column("End (UTC)", style="green")
    for name, window in (("current", current), ("previous", previous)):
        table.add_row(name, format_shift_label(window, config.timezone), window.start, window.end)
    console.print(table)
