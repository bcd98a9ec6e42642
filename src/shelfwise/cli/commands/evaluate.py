"""Dry-run the transition evaluator.

- ``shelfwise evaluate chapter-read`` -- what a chapter-read event would do
- ``shelfwise evaluate inactivity`` -- sweep a library export the way the
  periodic scheduler does

Nothing is persisted: proposals are printed and the library file is left
untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
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
)
from shelfwise.library import LibraryError, load_works
from shelfwise.status import (
    ChapterReadContext,
    TrackedWork,
    apply_rereading_auto_clear,
    explain_chapter_read,
    explain_inactivity,
    merge_rules,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="evaluate",
    help="Preview automatic status transitions without saving anything",
    no_args_is_help=True,
)


@app.command("chapter-read")
def chapter_read(
    status: Annotated[str, typer.Argument(help="Current reading status of the work")],
    latest: Annotated[bool, typer.Option("--latest/--not-latest", help="The chapter read is the latest one")] = False,
    complete: Annotated[bool, typer.Option("--complete/--ongoing", help="The story is finished")] = False,
    rereading: Annotated[bool, typer.Option("--rereading", help="The work carries the re-reading flag")] = False,
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the status a chapter-read event would move a work to.

    Examples:
        shelfwise evaluate chapter-read reading --latest --complete
        shelfwise evaluate chapter-read up-to-date --not-latest
    """
    _, settings = load_settings_or_exit(settings_file, json_output)
    rules = merge_rules(settings.state_machine_rules, settings)

    work = TrackedWork(reading_status=status, rereading_flag=rereading)
    context = ChapterReadContext(is_latest_chapter=latest, is_story_complete=complete)
    decision = explain_chapter_read(work, context, rules)

    overlay_cleared = False
    if decision.to_status is not None:
        overlay_cleared = apply_rereading_auto_clear(
            work, decision.to_status, settings.rereading_overlay
        )

    result = {
        "from_status": status,
        "to_status": decision.to_status,
        "rule_id": decision.rule.id if decision.rule else None,
        "applicants": list(decision.applicants),
        "rereading_cleared": overlay_cleared,
    }
    if decision.rule is None:
        message = f"[dim]No rule applies; {status} stays unchanged[/dim]"
    else:
        message = (
            f"[green]{status} -> {decision.to_status}[/green] "
            f"(rule: {decision.rule.id})"
        )
        if overlay_cleared:
            message += "\n[yellow]Re-reading flag would be cleared[/yellow]"
    output_result(json_output, result, message)


@app.command("inactivity")
def inactivity(
    library_file: Annotated[Path, typer.Argument(help="JSON export of tracked works")],
    now: Annotated[Optional[int], typer.Option("--now", help="Evaluation time in epoch milliseconds (default: current time)")] = None,
    show_all: Annotated[bool, typer.Option("--all", help="Also list works that would not change")] = False,
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Sweep a library for inactivity transitions, like the scheduler does."""
    _, settings = load_settings_or_exit(settings_file, json_output)
    try:
        works = load_works(library_file)
    except LibraryError as exc:
        output_error(json_output, str(exc))
        raise typer.Exit(1)

    rules = merge_rules(settings.state_machine_rules, settings)
    proposals: list[dict] = []
    for work_id, work in works.items():
        decision = explain_inactivity(work, rules, now=now)
        if decision.rule is None and not show_all:
            continue
        cleared = apply_rereading_auto_clear(
            work, decision.to_status, settings.rereading_overlay
        )
        proposals.append(
            {
                "id": work_id,
                "from_status": work.reading_status,
                "to_status": decision.to_status,
                "rule_id": decision.rule.id if decision.rule else None,
                "rereading_cleared": cleared,
            }
        )
    logger.info("%d of %d works would change status", sum(1 for p in proposals if p["to_status"]), len(works))

    if json_output:
        output_result(True, {"works": len(works), "proposals": proposals})
        return

    if not proposals:
        console.print(f"[dim]No inactivity transitions for {len(works)} works[/dim]")
        return

    table = Table(title="Inactivity Transitions")
    table.add_column("Work", style="cyan")
    table.add_column("Status")
    table.add_column("Proposed", style="green")
    table.add_column("Rule")
    for p in proposals:
        table.add_row(
            p["id"],
            p["from_status"],
            p["to_status"] or "[dim]unchanged[/dim]",
            (p["rule_id"] or "-") + (" [yellow](re-reading cleared)[/yellow]" if p["rereading_cleared"] else ""),
        )
    console.print(table)
