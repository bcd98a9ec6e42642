"""Transition evaluator.

Stateless and pull-based: each call looks at one work, one event and the
effective rule list (already ordered by :func:`merge_rules`) and proposes a
target status, or ``None`` for "leave the status alone". Nothing here
raises for malformed rules; a rule that cannot be read simply never fires.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import (
    WILDCARD,
    ChapterReadConditions,
    ChapterReadContext,
    Conditions,
    InactivityConditions,
    Rule,
    TrackedWork,
    Trigger,
)

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class TransitionDecision:
    """Outcome of one evaluation, with the rules that qualified."""

    rule: Rule | None
    applicants: tuple[str, ...] = field(default_factory=tuple)

    @property
    def to_status(self) -> str | None:
        return self.rule.to_status if self.rule is not None else None


def matches_from_status(
    current_status: str,
    from_statuses: Sequence[str],
    exclude_statuses: Sequence[str] = (),
) -> bool:
    """Check the rule's status constraints. Exclusions win over the wildcard."""
    if current_status in exclude_statuses:
        return False
    if WILDCARD in from_statuses:
        return True
    return current_status in from_statuses


def matches_chapter_read_conditions(
    conditions: ChapterReadConditions,
    context: ChapterReadContext,
) -> bool:
    if (
        conditions.require_latest_chapter is not None
        and conditions.require_latest_chapter != context.is_latest_chapter
    ):
        return False
    if (
        conditions.require_story_complete is not None
        and conditions.require_story_complete != context.is_story_complete
    ):
        return False
    return True


def matches_inactivity_conditions(
    conditions: InactivityConditions,
    days_since_last_access: float,
    chapters_read: float,
) -> bool:
    if (
        conditions.inactivity_days is not None
        and days_since_last_access < conditions.inactivity_days
    ):
        return False
    if (
        conditions.chapters_read_min is not None
        and chapters_read < conditions.chapters_read_min
    ):
        return False
    if (
        conditions.chapters_read_max is not None
        and chapters_read > conditions.chapters_read_max
    ):
        return False
    return True


def _as_chapter_read(conditions: Conditions) -> ChapterReadConditions:
    if isinstance(conditions, ChapterReadConditions):
        return conditions
    return ChapterReadConditions.from_dict(conditions)


def _as_inactivity(conditions: Conditions) -> InactivityConditions:
    if isinstance(conditions, InactivityConditions):
        return conditions
    return InactivityConditions.from_dict(conditions)


def _candidates(rules: Iterable[Rule], trigger: Trigger, work: TrackedWork) -> list[Rule]:
    return [
        r
        for r in rules
        if r.enabled
        and r.trigger == trigger
        and r.to_status
        and matches_from_status(work.reading_status, r.from_statuses, r.exclude_statuses)
    ]


def _decide(applicable: list[Rule], trigger: Trigger, work: TrackedWork) -> TransitionDecision:
    if not applicable:
        logger.debug("No %s rule applies to status %s", trigger, work.reading_status)
        return TransitionDecision(rule=None)
    winner = applicable[0]
    logger.debug(
        "%s rule %s wins for status %s -> %s",
        trigger,
        winner.id,
        work.reading_status,
        winner.to_status,
    )
    return TransitionDecision(
        rule=winner,
        applicants=tuple(r.id for r in applicable),
    )


def days_since_last_access(work: TrackedWork, now: float) -> float:
    """Days between ``now`` and the most recent activity timestamp (ms)."""
    timestamps = [
        ts
        for ts in (work.last_accessed_at, work.last_updated_at, work.added_at)
        if ts
    ]
    last_activity = max(timestamps) if timestamps else now
    return (now - last_activity) / MS_PER_DAY


def chapters_read(work: TrackedWork) -> float:
    return max(work.last_read_chapter or 0, work.current_chapter or 0)


def explain_chapter_read(
    work: TrackedWork,
    context: ChapterReadContext,
    rules: Iterable[Rule],
) -> TransitionDecision:
    """Evaluate ``chapterRead`` rules and report which ones qualified."""
    applicable = [
        r
        for r in _candidates(rules, Trigger.CHAPTER_READ, work)
        if matches_chapter_read_conditions(_as_chapter_read(r.conditions), context)
    ]
    return _decide(applicable, Trigger.CHAPTER_READ, work)


def explain_inactivity(
    work: TrackedWork,
    rules: Iterable[Rule],
    *,
    now: float | None = None,
) -> TransitionDecision:
    """Evaluate ``inactivity`` rules and report which ones qualified.

    ``now`` is epoch milliseconds; the current time is used when omitted.
    """
    if now is None:
        now = time.time() * 1000
    days = days_since_last_access(work, now)
    read = chapters_read(work)
    applicable = [
        r
        for r in _candidates(rules, Trigger.INACTIVITY, work)
        if matches_inactivity_conditions(_as_inactivity(r.conditions), days, read)
    ]
    return _decide(applicable, Trigger.INACTIVITY, work)


def evaluate_chapter_read_transitions(
    work: TrackedWork,
    context: ChapterReadContext,
    rules: Iterable[Rule],
) -> str | None:
    """Return the target status for a chapter-read event, or ``None``."""
    return explain_chapter_read(work, context, rules).to_status


def evaluate_inactivity_transitions(
    work: TrackedWork,
    rules: Iterable[Rule],
    *,
    now: float | None = None,
) -> str | None:
    """Return the target status for an inactive work, or ``None``."""
    return explain_inactivity(work, rules, now=now).to_status
