"""Status registry commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table
from typing_extensions import Annotated

from shelfwise.cli.output import (
    JsonOption,
    SettingsOption,
    console,
    load_settings_or_exit,
    output_error,
    output_result,
    swatch,
)
from shelfwise.settings import SettingsError, add_custom_status
from shelfwise.status import (
    CustomStatus,
    generate_id,
    get_all_statuses,
    get_primary_statuses,
)
from shelfwise.status.registry import CUSTOM_ORDER_BASE

app = typer.Typer(
    name="statuses",
    help="Inspect and extend the reading status catalog",
    no_args_is_help=True,
)


@app.command("list")
def list_statuses(
    primary: Annotated[bool, typer.Option("--primary", help="Hide the overlay-only re-reading status")] = False,
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show built-in and custom statuses in display order."""
    _, settings = load_settings_or_exit(settings_file, json_output)
    statuses = get_primary_statuses(settings) if primary else get_all_statuses(settings)

    if json_output:
        output_result(True, [s.to_dict() for s in statuses])
        return

    table = Table(title="Reading Statuses")
    table.add_column("Order", justify="right", style="magenta")
    table.add_column("Id", style="cyan")
    table.add_column("Label", style="bold")
    table.add_column("Color")
    table.add_column("Kind")
    for status in statuses:
        if status.is_overlay_only:
            kind = "[yellow]overlay[/yellow]"
        elif status.built_in:
            kind = "built-in"
        else:
            kind = "[green]custom[/green]"
        table.add_row(str(status.order), status.id, status.label, swatch(status.color), kind)
    console.print(table)


@app.command("add")
def add_status(
    label: Annotated[str, typer.Argument(help="Display label")],
    color: Annotated[str, typer.Option("--color", help="Hex color")] = "#60a5fa",
    order: Annotated[Optional[int], typer.Option("--order", help="Sort position (default: after existing customs)")] = None,
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Append a custom status to the settings file."""
    label = label.strip()
    if not label:
        output_error(json_output, "Status label must not be empty")
        raise typer.Exit(1)

    path, settings = load_settings_or_exit(settings_file, json_output)
    custom = CustomStatus(
        id=generate_id("status"),
        label=label,
        color=color,
        order=order if order is not None else CUSTOM_ORDER_BASE + len(settings.custom_statuses),
    )

    try:
        add_custom_status(path, custom)
    except (SettingsError, OSError) as exc:
        output_error(json_output, str(exc))
        raise typer.Exit(1)

    output_result(
        json_output,
        custom.to_dict(),
        f"[green]OK[/green] Added status {custom.id} ({custom.label})",
    )
