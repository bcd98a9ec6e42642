"""Rule commands.

- ``shelfwise rules list`` -- show the effective, priority-ordered rule list
- ``shelfwise rules add`` -- append a custom rule to the settings file
"""

from __future__ import annotations

import logging
from typing import List, Optional

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
from shelfwise.settings import SettingsError, add_saved_rule
from shelfwise.status import (
    DEFAULT_PRIORITY,
    ChapterReadConditions,
    InactivityConditions,
    Rule,
    Trigger,
    get_all_statuses,
    merge_rules,
    new_custom_rule,
)
from shelfwise.status.registry import status_ids

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="rules",
    help="Inspect and extend the status transition rules",
    no_args_is_help=True,
)


def _fmt_optional(value: object) -> str:
    return "any" if value is None else str(value)


def describe_conditions(rule: Rule) -> str:
    """One-line summary of a rule's conditions for table output."""
    c = rule.conditions
    if isinstance(c, ChapterReadConditions):
        return (
            f"latest={_fmt_optional(c.require_latest_chapter)} "
            f"complete={_fmt_optional(c.require_story_complete)}"
        )
    if isinstance(c, InactivityConditions):
        parts = [f"idle>={_fmt_optional(c.inactivity_days)}d"]
        if c.chapters_read_min is not None:
            parts.append(f"read>={c.chapters_read_min}")
        if c.chapters_read_max is not None:
            parts.append(f"read<={c.chapters_read_max}")
        return " ".join(parts)
    return "[dim]unknown trigger[/dim]"


@app.command("list")
def list_rules(
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the effective rule list in evaluation order."""
    _, settings = load_settings_or_exit(settings_file, json_output)
    rules = merge_rules(settings.state_machine_rules, settings)

    if json_output:
        output_result(True, [r.to_dict() for r in rules])
        return

    table = Table(title="Effective Status Rules", show_lines=False)
    table.add_column("Prio", justify="right", style="magenta")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Trigger")
    table.add_column("From")
    table.add_column("To", style="green")
    table.add_column("Conditions")
    table.add_column("On")

    for rule in rules:
        from_text = ", ".join(rule.from_statuses) or "-"
        if rule.exclude_statuses:
            from_text += f" [dim](not {', '.join(rule.exclude_statuses)})[/dim]"
        table.add_row(
            str(rule.priority),
            rule.id + (" 🔒" if rule.built_in else ""),
            rule.name,
            rule.trigger or "-",
            from_text,
            rule.to_status or "-",
            describe_conditions(rule),
            "[green]yes[/green]" if rule.enabled else "[red]no[/red]",
        )
    console.print(table)


@app.command("add")
def add_rule(
    name: Annotated[str, typer.Argument(help="Rule name")],
    to: Annotated[str, typer.Option("--to", help="Target status id")],
    trigger: Annotated[Trigger, typer.Option("--trigger", help="Event that fires the rule")] = Trigger.CHAPTER_READ,
    from_statuses: Annotated[Optional[List[str]], typer.Option("--from", help="Source status id (repeatable, '*' for any)")] = None,
    exclude: Annotated[Optional[List[str]], typer.Option("--exclude", help="Status id never matched (repeatable)")] = None,
    priority: Annotated[int, typer.Option("--priority", help="Higher runs first")] = DEFAULT_PRIORITY,
    latest: Annotated[Optional[bool], typer.Option("--latest/--not-latest", help="Require (or forbid) reading the latest chapter")] = None,
    complete: Annotated[Optional[bool], typer.Option("--complete/--ongoing", help="Require a finished (or ongoing) story")] = None,
    days: Annotated[Optional[float], typer.Option("--days", help="Minimum days of inactivity")] = None,
    min_chapters: Annotated[Optional[float], typer.Option("--min-chapters", help="Minimum chapters read")] = None,
    max_chapters: Annotated[Optional[float], typer.Option("--max-chapters", help="Maximum chapters read")] = None,
    description: Annotated[str, typer.Option("--description", help="Longer description")] = "",
    settings_file: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Append a custom rule to the settings file.

    Examples:
        shelfwise rules add "Drop stale plans" --trigger inactivity --from plan-to-read --to dropped --days 180
        shelfwise rules add "Finish on last chapter" --from '*' --exclude dropped --to completed --latest --complete --priority 40
    """
    path, settings = load_settings_or_exit(settings_file, json_output)

    known = status_ids(get_all_statuses(settings))
    unknown = [s for s in [to, *(from_statuses or []), *(exclude or [])] if s != "*" and s not in known]
    if unknown:
        output_error(json_output, f"Unknown status id(s): {', '.join(unknown)}")
        raise typer.Exit(1)

    if trigger is Trigger.INACTIVITY:
        conditions = InactivityConditions(
            inactivity_days=days,
            chapters_read_min=min_chapters,
            chapters_read_max=max_chapters,
        ).to_dict()
    else:
        conditions = ChapterReadConditions(
            require_latest_chapter=latest,
            require_story_complete=complete,
        ).to_dict()

    rule = new_custom_rule(
        name,
        trigger=trigger.value,
        from_statuses=tuple(from_statuses or ["reading"]),
        exclude_statuses=tuple(exclude or []),
        to_status=to,
        priority=priority,
        conditions=conditions,
        description=description,
    )

    try:
        add_saved_rule(path, rule)
    except (SettingsError, OSError) as exc:
        output_error(json_output, str(exc))
        raise typer.Exit(1)

    logger.debug("Added custom rule %s to %s", rule.id, path)
    output_result(
        json_output,
        rule.to_dict(),
        f"[green]OK[/green] Added rule {rule.id} ({rule.trigger} -> {rule.to_status})",
    )
