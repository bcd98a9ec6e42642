"""Validation for saved rules, statuses and overlay settings.

The engine itself degrades permissively on bad data; these checks are for
callers (the settings editor, the ``validate`` command) that want to surface
problems before they silently turn into rules that never fire. Each check
returns a list of human-readable findings.

This module is a library -- it reports problems but never modifies data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .catalog import is_builtin_rule_id
from .models import WILDCARD, LibrarySettings, ReadingStatus, Trigger
from .registry import get_all_statuses, status_ids

# Fields a saved built-in override may carry without being ignored.
OVERRIDABLE_FIELDS = frozenset(
    {"id", "enabled", "name", "description", "priority", "conditions", "builtIn"}
)


@dataclass
class ValidationResult:
    """Aggregate result of all validation checks."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def validate_custom_statuses(settings: LibrarySettings) -> list[str]:
    """Custom status ids must be unique and must not shadow a built-in."""
    findings: list[str] = []
    builtin_ids = {s.value for s in ReadingStatus}
    seen: set[str] = set()
    for custom in settings.custom_statuses:
        if custom.id in builtin_ids:
            findings.append(f"Custom status {custom.id} collides with a built-in status")
        elif custom.id in seen:
            findings.append(f"Duplicate custom status id: {custom.id}")
        seen.add(custom.id)
        if not custom.id.strip():
            findings.append("Custom status with an empty id")
    return findings


def validate_rule_ids(saved_rules: Iterable[Mapping[str, Any]]) -> list[str]:
    """Every saved rule needs an id, and ids must be unique."""
    findings: list[str] = []
    seen: set[str] = set()
    for index, rule in enumerate(saved_rules):
        rule_id = rule.get("id")
        if rule_id is None or not str(rule_id).strip():
            findings.append(f"Saved rule #{index} has no id")
            continue
        if str(rule_id) in seen:
            findings.append(f"Duplicate rule id: {rule_id}")
        seen.add(str(rule_id))
    return findings


def validate_builtin_overrides(saved_rules: Iterable[Mapping[str, Any]]) -> list[str]:
    """Warn about override fields that the merger will ignore."""
    findings: list[str] = []
    for rule in saved_rules:
        rule_id = str(rule.get("id", ""))
        if not is_builtin_rule_id(rule_id):
            continue
        ignored = sorted(set(rule) - OVERRIDABLE_FIELDS)
        if ignored:
            findings.append(
                f"Rule {rule_id}: built-in fields cannot be overridden, ignoring "
                + ", ".join(ignored)
            )
    return findings


def validate_rule_statuses(
    saved_rules: Iterable[Mapping[str, Any]],
    known_statuses: set[str],
) -> tuple[list[str], list[str]]:
    """Check custom rules' trigger and status references.

    Returns ``(errors, warnings)``: an unknown target status is an error
    (the rule would move works into a status nobody can see); unknown
    triggers and unknown source statuses are warnings (the rule just never
    fires for them).
    """
    errors: list[str] = []
    warnings: list[str] = []
    valid_triggers = {t.value for t in Trigger}
    for rule in saved_rules:
        rule_id = str(rule.get("id", ""))
        if not rule_id or is_builtin_rule_id(rule_id):
            continue

        trigger = rule.get("trigger")
        if trigger not in valid_triggers:
            warnings.append(f"Rule {rule_id}: unknown trigger {trigger!r}, it will never fire")

        to_status = rule.get("toStatus")
        if not to_status:
            errors.append(f"Rule {rule_id}: missing toStatus")
        elif to_status not in known_statuses:
            errors.append(f"Rule {rule_id}: toStatus {to_status} is not a known status")

        for key in ("fromStatuses", "excludeStatuses"):
            values = rule.get(key) or []
            if not isinstance(values, list):
                warnings.append(f"Rule {rule_id}: {key} should be a list")
                continue
            for value in values:
                if value != WILDCARD and value not in known_statuses:
                    warnings.append(f"Rule {rule_id}: {key} references unknown status {value}")

        if "priority" in rule and (
            isinstance(rule["priority"], bool)
            or not isinstance(rule["priority"], (int, float))
        ):
            warnings.append(f"Rule {rule_id}: non-numeric priority, using default")
    return errors, warnings


def validate_overlay(settings: LibrarySettings, known_statuses: set[str]) -> list[str]:
    return [
        f"Re-reading overlay auto-clears on unknown status {status}"
        for status in settings.rereading_overlay.auto_clear_on
        if status not in known_statuses
    ]


def validate_settings(settings: LibrarySettings) -> ValidationResult:
    """Run every check against ``settings``."""
    result = ValidationResult()
    known = status_ids(get_all_statuses(settings))
    saved = settings.state_machine_rules

    if settings.auto_hold_days < 0:
        result.errors.append(f"autoHoldDays must not be negative, got {settings.auto_hold_days}")

    result.errors.extend(validate_custom_statuses(settings))
    result.errors.extend(validate_rule_ids(saved))
    result.warnings.extend(validate_builtin_overrides(saved))

    rule_errors, rule_warnings = validate_rule_statuses(saved, known)
    result.errors.extend(rule_errors)
    result.warnings.extend(rule_warnings)
    result.warnings.extend(validate_overlay(settings, known))
    return result


__all__ = [
    "ValidationResult",
    "validate_builtin_overrides",
    "validate_custom_statuses",
    "validate_overlay",
    "validate_rule_ids",
    "validate_rule_statuses",
    "validate_settings",
]
