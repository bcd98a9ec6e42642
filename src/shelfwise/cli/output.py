"""Shared output helpers for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from typing_extensions import Annotated

from shelfwise.settings import SettingsError, load_settings, settings_path
from shelfwise.status.models import LibrarySettings

console = Console()

SettingsOption = Annotated[
    Optional[Path],
    typer.Option(
        "--settings",
        "-s",
        help="Settings file (default: $SHELFWISE_SETTINGS or ./shelfwise.yaml)",
    ),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Machine-readable JSON output")]


def output_result(json_mode: bool, data: Any, success_message: str | None = None) -> None:
    """Output result in JSON or human-readable format."""
    if json_mode:
        print(json.dumps(data))
    elif success_message:
        console.print(success_message)


def output_error(json_mode: bool, error_message: str) -> None:
    """Output error in JSON or human-readable format."""
    if json_mode:
        print(json.dumps({"error": error_message}))
    else:
        console.print(f"[red]Error:[/red] {error_message}")


def load_settings_or_exit(
    explicit: Path | None, json_mode: bool
) -> tuple[Path, LibrarySettings]:
    """Resolve and load the settings file, exiting with code 1 on failure."""
    path = settings_path(explicit)
    try:
        return path, load_settings(path)
    except SettingsError as exc:
        output_error(json_mode, str(exc))
        raise typer.Exit(1)


def swatch(color: str) -> str:
    """Render a color sample for rich output."""
    return f"[{color}]■[/] {color}"
