"""Built-in rule catalog.

Five fixed-identity rules reproduce the tracker's default behaviour. Users
may disable or retune them through overrides but can never delete them or
change what transition they encode.
"""

from __future__ import annotations

from ulid import ULID

from .models import (
    DEFAULT_PRIORITY,
    ChapterReadConditions,
    InactivityConditions,
    ReadingStatus,
    Rule,
    Trigger,
    conditions_from_dict,
)

DEFAULT_AUTO_HOLD_DAYS = 7

INACTIVITY_HOLD = "builtin-inactivity-hold"
INACTIVITY_PLAN = "builtin-inactivity-plan"
CHAPTER_COMPLETE = "builtin-chapter-complete"
CHAPTER_UPTODATE = "builtin-chapter-uptodate"
CHAPTER_FROM_UTD = "builtin-chapter-from-utd"

BUILTIN_RULE_IDS: tuple[str, ...] = (
    INACTIVITY_HOLD,
    INACTIVITY_PLAN,
    CHAPTER_COMPLETE,
    CHAPTER_UPTODATE,
    CHAPTER_FROM_UTD,
)


def is_builtin_rule_id(rule_id: str) -> bool:
    return rule_id in BUILTIN_RULE_IDS


def get_builtin_rules() -> list[Rule]:
    """Return a fresh list of the built-in rules.

    The inactivity rules carry a placeholder ``inactivity_days`` of 0;
    :func:`shelfwise.status.merge.merge_rules` replaces it with the live
    ``autoHoldDays`` setting.
    """
    return [
        Rule(
            id=INACTIVITY_HOLD,
            name="Auto Hold on Inactivity",
            description=(
                "Move to 'On Hold' if the work hasn't been opened for the "
                "configured days and at least 2 chapters have been read."
            ),
            built_in=True,
            enabled=True,
            trigger=Trigger.INACTIVITY.value,
            from_statuses=(ReadingStatus.READING.value,),
            exclude_statuses=(),
            to_status=ReadingStatus.ON_HOLD.value,
            priority=20,
            conditions=InactivityConditions(
                inactivity_days=0,
                chapters_read_min=2,
                chapters_read_max=None,
            ),
        ),
        Rule(
            id=INACTIVITY_PLAN,
            name="Auto Plan-to-Read on Inactivity",
            description=(
                "Move to 'Plan to Read' if the work hasn't been opened for the "
                "configured days and 1 or fewer chapters have been read."
            ),
            built_in=True,
            enabled=True,
            trigger=Trigger.INACTIVITY.value,
            from_statuses=(ReadingStatus.READING.value,),
            exclude_statuses=(),
            to_status=ReadingStatus.PLAN_TO_READ.value,
            priority=10,
            conditions=InactivityConditions(
                inactivity_days=0,
                chapters_read_min=None,
                chapters_read_max=1,
            ),
        ),
        Rule(
            id=CHAPTER_COMPLETE,
            name="Complete When Caught Up on Finished Story",
            description=(
                "Mark Completed when reading the latest chapter of a story "
                "the author has finished publishing."
            ),
            built_in=True,
            enabled=True,
            trigger=Trigger.CHAPTER_READ.value,
            from_statuses=(
                ReadingStatus.READING.value,
                ReadingStatus.UP_TO_DATE.value,
            ),
            exclude_statuses=(
                ReadingStatus.COMPLETED.value,
                ReadingStatus.DROPPED.value,
            ),
            to_status=ReadingStatus.COMPLETED.value,
            priority=30,
            conditions=ChapterReadConditions(
                require_latest_chapter=True,
                require_story_complete=True,
            ),
        ),
        Rule(
            id=CHAPTER_UPTODATE,
            name="Up to Date on Latest Chapter (Ongoing Story)",
            description=(
                "Mark Up to Date when reading the latest chapter of an ongoing story."
            ),
            built_in=True,
            enabled=True,
            trigger=Trigger.CHAPTER_READ.value,
            from_statuses=(ReadingStatus.READING.value,),
            exclude_statuses=(),
            to_status=ReadingStatus.UP_TO_DATE.value,
            priority=20,
            conditions=ChapterReadConditions(
                require_latest_chapter=True,
                require_story_complete=False,
            ),
        ),
        Rule(
            id=CHAPTER_FROM_UTD,
            name="Back to Reading When Not at Latest Chapter",
            description=(
                "Move from Up to Date back to Reading if an older chapter is "
                "read (e.g. after a new chapter is released)."
            ),
            built_in=True,
            enabled=True,
            trigger=Trigger.CHAPTER_READ.value,
            from_statuses=(ReadingStatus.UP_TO_DATE.value,),
            exclude_statuses=(),
            to_status=ReadingStatus.READING.value,
            priority=10,
            conditions=ChapterReadConditions(
                require_latest_chapter=False,
                require_story_complete=None,
            ),
        ),
    ]


def generate_id(prefix: str = "custom") -> str:
    """Return a unique identifier for a custom rule or status."""
    return f"{prefix}-{str(ULID()).lower()}"


def new_custom_rule(
    name: str = "New Rule",
    *,
    trigger: str = Trigger.CHAPTER_READ.value,
    from_statuses: tuple[str, ...] = (ReadingStatus.READING.value,),
    exclude_statuses: tuple[str, ...] = (),
    to_status: str = ReadingStatus.READING.value,
    priority: int | float = DEFAULT_PRIORITY,
    conditions: dict | None = None,
    description: str = "",
) -> Rule:
    """Build a custom rule with a generated id and the tracker's defaults."""
    return Rule(
        id=generate_id("rule"),
        name=name,
        description=description,
        built_in=False,
        enabled=True,
        trigger=trigger,
        from_statuses=tuple(from_statuses),
        exclude_statuses=tuple(exclude_statuses),
        to_status=to_status,
        priority=priority,
        conditions=conditions_from_dict(trigger, conditions or {}),
    )
