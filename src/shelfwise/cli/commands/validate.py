"""``shelfwise validate`` -- check the settings file for rule/status problems."""

from __future__ import annotations

import typer

from shelfwise.cli.output import (
    JsonOption,
    SettingsOption,
    console,
    load_settings_or_exit,
    output_result,
)
from shelfwise.status import validate_settings


def validate(
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Treat warnings as errors",
    ),
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Validate saved rules, custom statuses and overlay settings."""
    path, settings = load_settings_or_exit(settings_file, json_output)
    result = validate_settings(settings)
    failed = not result.passed or (strict and bool(result.warnings))

    if json_output:
        output_result(True, {"settings": str(path), **result.to_dict()})
    else:
        for error in result.errors:
            console.print(f"[red]ERROR[/red] {error}")
        for warning in result.warnings:
            console.print(f"[yellow]WARN[/yellow]  {warning}")
        if not result.errors and not result.warnings:
            console.print(f"[green]OK[/green] {path} has no problems")
        else:
            console.print(
                f"\n{len(result.errors)} error(s), {len(result.warnings)} warning(s) in {path}"
            )

    if failed:
        raise typer.Exit(1)
