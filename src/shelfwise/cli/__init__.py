"""shelfwise command-line interface.

Usage:
    shelfwise rules list
    shelfwise statuses list --primary
    shelfwise evaluate chapter-read reading --latest --complete
    shelfwise evaluate inactivity library.json
    shelfwise validate
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from shelfwise import __version__
from shelfwise.cli.commands import evaluate, rules, statuses, validate
from shelfwise.cli.output import console

app = typer.Typer(
    name="shelfwise",
    help="Automatic reading-status transitions for your reading tracker",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(rules.app, name="rules")
app.add_typer(statuses.app, name="statuses")
app.add_typer(evaluate.app, name="evaluate")
app.command("validate")(validate.validate)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"shelfwise {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Configure logging for every subcommand."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main() -> None:
    app()


__all__ = ["app", "main"]
