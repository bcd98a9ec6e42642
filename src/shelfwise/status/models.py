"""Data model for the reading-status rule engine.

Defines the built-in status and trigger enums, the Status catalog entry,
trigger-shaped rule conditions, Rule and RulePatch, the chapter-read event
context, the TrackedWork subset the engine consumes, and the re-reading
OverlayConfig.

Persisted shapes use the tracker's camelCase keys; ``from_dict`` parsing is
permissive and never raises for wrong value types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Mapping, Union


class ReadingStatus(StrEnum):
    """Built-in reading statuses, in fixed enumeration order."""

    READING = "reading"
    UP_TO_DATE = "up-to-date"
    COMPLETED = "completed"
    PLAN_TO_READ = "plan-to-read"
    ON_HOLD = "on-hold"
    DROPPED = "dropped"
    RE_READING = "re-reading"


class Trigger(StrEnum):
    """Event categories a rule can respond to."""

    CHAPTER_READ = "chapterRead"
    INACTIVITY = "inactivity"


WILDCARD = "*"
DEFAULT_PRIORITY = 10
DEFAULT_STATUS_COLOR = "#666666"
OVERLAY_STATUS = ReadingStatus.RE_READING


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    return None


def _optional_number(value: Any) -> float | None:
    return value if _is_number(value) else None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value)


def coerce_priority(value: Any) -> int | float:
    """Return ``value`` if it is a finite number, else :data:`DEFAULT_PRIORITY`."""
    if _is_number(value) and math.isfinite(value):
        return value
    return DEFAULT_PRIORITY


@dataclass(frozen=True)
class Status:
    """One entry of the merged status catalog."""

    id: str
    label: str
    color: str
    built_in: bool
    is_overlay_only: bool
    order: int | float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "color": self.color,
            "builtIn": self.built_in,
            "isOverlayOnly": self.is_overlay_only,
            "order": self.order,
        }


@dataclass(frozen=True)
class StatusAppearance:
    """A ``statusConfig`` entry: label and/or color override."""

    label: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.label is not None:
            d["label"] = self.label
        if self.color is not None:
            d["color"] = self.color
        return d

    @classmethod
    def from_dict(cls, data: Any) -> StatusAppearance:
        if not isinstance(data, Mapping):
            return cls()
        label = data.get("label")
        color = data.get("color")
        return cls(
            label=label if isinstance(label, str) else None,
            color=color if isinstance(color, str) else None,
        )


@dataclass(frozen=True)
class CustomStatus:
    """A user-defined status saved in ``customStatuses``."""

    id: str
    label: str
    color: str = DEFAULT_STATUS_COLOR
    order: int | float | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "color": self.color,
        }
        if self.order is not None:
            d["order"] = self.order
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CustomStatus:
        status_id = str(data["id"])
        label = data.get("label")
        color = data.get("color")
        return cls(
            id=status_id,
            label=label if isinstance(label, str) else status_id,
            color=color if isinstance(color, str) else DEFAULT_STATUS_COLOR,
            order=_optional_number(data.get("order")),
        )


@dataclass(frozen=True)
class ChapterReadConditions:
    """Conditions for ``chapterRead`` rules. ``None`` means don't check."""

    require_latest_chapter: bool | None = None
    require_story_complete: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "requireLatestChapter": self.require_latest_chapter,
            "requireStoryComplete": self.require_story_complete,
        }

    @classmethod
    def from_dict(cls, data: Any) -> ChapterReadConditions:
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            require_latest_chapter=_optional_bool(data.get("requireLatestChapter")),
            require_story_complete=_optional_bool(data.get("requireStoryComplete")),
        )


@dataclass(frozen=True)
class InactivityConditions:
    """Conditions for ``inactivity`` rules. ``None`` means don't check."""

    inactivity_days: float | None = None
    chapters_read_min: float | None = None
    chapters_read_max: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "inactivityDays": self.inactivity_days,
            "chaptersReadMin": self.chapters_read_min,
            "chaptersReadMax": self.chapters_read_max,
        }

    @classmethod
    def from_dict(cls, data: Any) -> InactivityConditions:
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            inactivity_days=_optional_number(data.get("inactivityDays")),
            chapters_read_min=_optional_number(data.get("chaptersReadMin")),
            chapters_read_max=_optional_number(data.get("chaptersReadMax")),
        )


# Unknown triggers keep their raw mapping so custom rules round-trip verbatim.
Conditions = Union[ChapterReadConditions, InactivityConditions, dict]


def conditions_from_dict(trigger: str, data: Any) -> Conditions:
    """Parse ``data`` into the conditions shape for ``trigger``."""
    if trigger == Trigger.CHAPTER_READ:
        return ChapterReadConditions.from_dict(data)
    if trigger == Trigger.INACTIVITY:
        return InactivityConditions.from_dict(data)
    return dict(data) if isinstance(data, Mapping) else {}


def conditions_to_dict(conditions: Conditions) -> dict[str, Any]:
    if isinstance(conditions, (ChapterReadConditions, InactivityConditions)):
        return conditions.to_dict()
    return dict(conditions)


@dataclass(frozen=True)
class Rule:
    """A status transition rule, built-in or custom."""

    id: str
    name: str
    trigger: str
    to_status: str
    from_statuses: tuple[str, ...] = (WILDCARD,)
    exclude_statuses: tuple[str, ...] = ()
    description: str = ""
    built_in: bool = False
    enabled: bool = True
    priority: int | float = DEFAULT_PRIORITY
    conditions: Conditions = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "builtIn": self.built_in,
            "enabled": self.enabled,
            "trigger": self.trigger,
            "fromStatuses": list(self.from_statuses),
            "excludeStatuses": list(self.exclude_statuses),
            "toStatus": self.to_status,
            "priority": self.priority,
            "conditions": conditions_to_dict(self.conditions),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rule:
        """Parse a saved custom rule.

        Only ``id`` is required; everything else degrades to a value that
        cannot fire by accident (unknown trigger, empty target).
        """
        rule_id = str(data["id"])
        trigger = data.get("trigger")
        trigger = trigger if isinstance(trigger, str) else ""
        name = data.get("name")
        description = data.get("description")
        to_status = data.get("toStatus")
        return cls(
            id=rule_id,
            name=name if isinstance(name, str) else rule_id,
            description=description if isinstance(description, str) else "",
            built_in=False,
            enabled=data.get("enabled") is True,
            trigger=trigger,
            from_statuses=_str_tuple(data.get("fromStatuses")),
            exclude_statuses=_str_tuple(data.get("excludeStatuses")),
            to_status=to_status if isinstance(to_status, str) else "",
            priority=coerce_priority(data.get("priority")),
            conditions=conditions_from_dict(trigger, data.get("conditions")),
        )


@dataclass(frozen=True)
class RulePatch:
    """The user-overridable subset of a built-in rule.

    Every field is optional; ``None`` leaves the built-in value alone.
    Identity fields (trigger, statuses, target) are deliberately absent.
    """

    enabled: bool | None = None
    name: str | None = None
    description: str | None = None
    priority: int | float | None = None
    conditions: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RulePatch:
        enabled = data.get("enabled")
        name = data.get("name")
        description = data.get("description")
        priority = data.get("priority")
        conditions = data.get("conditions")
        return cls(
            enabled=enabled if isinstance(enabled, bool) else None,
            name=name if isinstance(name, str) else None,
            description=description if isinstance(description, str) else None,
            priority=coerce_priority(priority) if "priority" in data else None,
            conditions=conditions if isinstance(conditions, Mapping) else None,
        )

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.enabled,
                self.name,
                self.description,
                self.priority,
                self.conditions,
            )
        )

    def apply(self, rule: Rule) -> Rule:
        """Return ``rule`` with the patched fields replaced."""
        changes: dict[str, Any] = {}
        if self.enabled is not None:
            changes["enabled"] = self.enabled
        if self.name is not None:
            changes["name"] = self.name
        if self.description is not None:
            changes["description"] = self.description
        if self.priority is not None:
            changes["priority"] = self.priority
        if self.conditions is not None:
            # Replaces the built-in conditions whole; absent keys mean "don't check".
            changes["conditions"] = conditions_from_dict(rule.trigger, self.conditions)
        return replace(rule, built_in=True, **changes)


@dataclass(frozen=True)
class ChapterReadContext:
    """Caller-computed facts about the chapter that was just read."""

    is_latest_chapter: bool
    is_story_complete: bool


@dataclass
class TrackedWork:
    """The subset of a tracked work record the engine reads.

    Timestamps are epoch milliseconds. Mutable: the overlay manager clears
    ``rereading_flag`` in place.
    """

    reading_status: str
    rereading_flag: bool = False
    last_read_chapter: float = 0
    current_chapter: float = 0
    last_accessed_at: int | None = None
    last_updated_at: int | None = None
    added_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "readingStatus": self.reading_status,
            "rereadingStatus": self.rereading_flag,
            "lastReadChapter": self.last_read_chapter,
            "currentChapter": self.current_chapter,
            "lastAccessedAt": self.last_accessed_at,
            "lastUpdated": self.last_updated_at,
            "addedAt": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TrackedWork:
        metadata = data.get("metadata")
        current_chapter = data.get("currentChapter")
        if not _is_number(current_chapter) and isinstance(metadata, Mapping):
            current_chapter = metadata.get("currentChapter")
        last_updated = data.get("lastUpdatedAt", data.get("lastUpdated"))
        status = data.get("readingStatus")
        return cls(
            reading_status=str(status) if status is not None else ReadingStatus.READING.value,
            rereading_flag=data.get("rereadingStatus", data.get("rereadingFlag")) is True,
            last_read_chapter=_optional_number(data.get("lastReadChapter")) or 0,
            current_chapter=_optional_number(current_chapter) or 0,
            last_accessed_at=_optional_number(data.get("lastAccessedAt")),
            last_updated_at=_optional_number(last_updated),
            added_at=_optional_number(data.get("addedAt")),
        )


@dataclass(frozen=True)
class OverlayConfig:
    """Settings for the re-reading overlay flag."""

    enabled: bool = True
    label: str = "🔁 Re-reading"
    color: str = "#9c27b0"
    auto_clear_on: tuple[str, ...] = (ReadingStatus.DROPPED.value,)

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "label": self.label,
            "color": self.color,
            "autoClearOn": list(self.auto_clear_on),
        }

    @classmethod
    def from_dict(cls, data: Any) -> OverlayConfig:
        """Parse a saved overlay config, filling gaps from the defaults."""
        default = cls()
        if not isinstance(data, Mapping):
            return default
        enabled = data.get("enabled")
        label = data.get("label")
        color = data.get("color")
        auto_clear_on = data.get("autoClearOn")
        return cls(
            enabled=enabled if isinstance(enabled, bool) else default.enabled,
            label=label if isinstance(label, str) and label else default.label,
            color=color if isinstance(color, str) and color else default.color,
            auto_clear_on=_str_tuple(auto_clear_on)
            if auto_clear_on is not None
            else default.auto_clear_on,
        )


@dataclass
class LibrarySettings:
    """The settings aggregate the engine reads.

    ``state_machine_rules`` stays raw: the merger decides per entry whether
    it is a built-in override or a custom rule.
    """

    auto_hold_days: float = 7
    auto_hold_enabled: bool = True
    status_config: dict[str, StatusAppearance] = field(default_factory=dict)
    custom_statuses: list[CustomStatus] = field(default_factory=list)
    state_machine_rules: list[dict[str, Any]] = field(default_factory=list)
    rereading_overlay: OverlayConfig = field(default_factory=OverlayConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "autoHoldDays": self.auto_hold_days,
            "autoHoldEnabled": self.auto_hold_enabled,
            "statusConfig": {
                key: appearance.to_dict()
                for key, appearance in self.status_config.items()
            },
            "customStatuses": [cs.to_dict() for cs in self.custom_statuses],
            "stateMachineRules": [dict(r) for r in self.state_machine_rules],
            "rereadingOverlay": self.rereading_overlay.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> LibrarySettings:
        if not isinstance(data, Mapping):
            return cls()
        auto_hold_days = data.get("autoHoldDays")
        status_config = data.get("statusConfig")
        custom_statuses = data.get("customStatuses")
        rules = data.get("stateMachineRules")
        return cls(
            auto_hold_days=auto_hold_days if _is_number(auto_hold_days) else 7,
            # Only an explicit false turns the legacy switch off.
            auto_hold_enabled=data.get("autoHoldEnabled") is not False,
            status_config={
                str(key): StatusAppearance.from_dict(value)
                for key, value in status_config.items()
            }
            if isinstance(status_config, Mapping)
            else {},
            custom_statuses=[
                CustomStatus.from_dict(cs)
                for cs in custom_statuses
                if isinstance(cs, Mapping) and cs.get("id") is not None
            ]
            if isinstance(custom_statuses, list)
            else [],
            state_machine_rules=[dict(r) for r in rules if isinstance(r, Mapping)]
            if isinstance(rules, list)
            else [],
            rereading_overlay=OverlayConfig.from_dict(data.get("rereadingOverlay")),
        )
