"""Rule merger: built-ins + saved overrides + custom rules.

Produces the effective rule list for one evaluation pass:

    1. Fresh copy of the built-in catalog
    2. Patch ``inactivity_days`` on inactivity built-ins from ``autoHoldDays``
    3. Apply saved overrides (RulePatch) to built-ins by id
    4. Force inactivity built-ins off when ``autoHoldEnabled`` is false
    5. Append saved entries with non-built-in ids as custom rules
    6. Sort by priority descending, built-ins first on ties, then by id

Saved data is never modified. Malformed entries are skipped, not raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping

from .catalog import DEFAULT_AUTO_HOLD_DAYS, get_builtin_rules, is_builtin_rule_id
from .models import (
    InactivityConditions,
    LibrarySettings,
    Rule,
    RulePatch,
    Trigger,
)

logger = logging.getLogger(__name__)


def sort_rules(rules: Iterable[Rule]) -> list[Rule]:
    """Order rules for evaluation.

    Highest priority first. Equal priorities put built-ins before custom
    rules and then compare ids, so the order never depends on input order.
    """
    return sorted(rules, key=lambda r: (-r.priority, not r.built_in, r.id))


def _patch_inactivity_days(rule: Rule, days: float) -> Rule:
    conditions = rule.conditions
    if not isinstance(conditions, InactivityConditions):
        conditions = InactivityConditions()
    return replace(rule, conditions=replace(conditions, inactivity_days=days))


def _index_saved(saved_rules: Iterable[Any]) -> tuple[dict[str, Mapping[str, Any]], list[Rule]]:
    """Split saved entries into built-in overrides and parsed custom rules."""
    overrides: dict[str, Mapping[str, Any]] = {}
    customs: list[Rule] = []
    for index, entry in enumerate(saved_rules):
        if not isinstance(entry, Mapping) or entry.get("id") is None:
            logger.warning("Skipping saved rule #%s without an id", index)
            continue
        rule_id = str(entry["id"])
        if is_builtin_rule_id(rule_id):
            if rule_id in overrides:
                logger.warning("Duplicate override for %s; keeping the first", rule_id)
                continue
            overrides[rule_id] = entry
        else:
            customs.append(Rule.from_dict(entry))
    return overrides, customs


def merge_rules(
    saved_rules: Iterable[Any] | None,
    settings: LibrarySettings | None = None,
) -> list[Rule]:
    """Return the effective, priority-ordered rule list.

    Args:
        saved_rules: Raw ``stateMachineRules`` entries (overrides and customs).
        settings: Library settings supplying ``auto_hold_days`` and
            ``auto_hold_enabled``; defaults apply when omitted.
    """
    if settings is None:
        settings = LibrarySettings()
    auto_hold_days = settings.auto_hold_days
    if isinstance(auto_hold_days, bool) or not isinstance(auto_hold_days, (int, float)):
        auto_hold_days = DEFAULT_AUTO_HOLD_DAYS

    overrides, customs = _index_saved(saved_rules or [])

    merged: list[Rule] = []
    for rule in get_builtin_rules():
        if rule.trigger == Trigger.INACTIVITY:
            rule = _patch_inactivity_days(rule, auto_hold_days)

        override = overrides.get(rule.id)
        if override is not None:
            patch = RulePatch.from_dict(override)
            if not patch.is_empty():
                logger.debug("Applying saved override to %s: %s", rule.id, patch)
                rule = patch.apply(rule)

        # Legacy on/off switch wins over any saved override.
        if rule.trigger == Trigger.INACTIVITY and not settings.auto_hold_enabled:
            rule = replace(rule, enabled=False)

        merged.append(rule)

    for rule in customs:
        logger.debug("Appending custom rule %s (%s)", rule.id, rule.trigger)
        merged.append(rule)

    return sort_rules(merged)
