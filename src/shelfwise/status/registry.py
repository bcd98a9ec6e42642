"""Status registry: built-in statuses merged with user customizations.

Every call builds a fresh snapshot from the settings; no shared label map
is ever modified in place.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from .models import (
    DEFAULT_STATUS_COLOR,
    OVERLAY_STATUS,
    LibrarySettings,
    ReadingStatus,
    Status,
    StatusAppearance,
)

# Default label/color per built-in status.
BUILTIN_STATUS_INFO: dict[str, StatusAppearance] = {
    ReadingStatus.READING: StatusAppearance(label="📖 Reading", color="#4caf50"),
    ReadingStatus.UP_TO_DATE: StatusAppearance(label="✨ Up to Date", color="#00bcd4"),
    ReadingStatus.COMPLETED: StatusAppearance(label="✅ Completed", color="#2196f3"),
    ReadingStatus.PLAN_TO_READ: StatusAppearance(label="📋 Plan to Read", color="#ff9800"),
    ReadingStatus.ON_HOLD: StatusAppearance(label="⏸️ On Hold", color="#9e9e9e"),
    ReadingStatus.DROPPED: StatusAppearance(label="❌ Dropped", color="#f44336"),
    ReadingStatus.RE_READING: StatusAppearance(label="🔁 Re-reading", color="#9c27b0"),
}

CUSTOM_ORDER_BASE = 100


def _resolve(
    override: StatusAppearance | None,
    default_label: str,
    default_color: str,
) -> tuple[str, str]:
    label = default_label
    color = default_color
    if override is not None:
        label = override.label if override.label is not None else label
        color = override.color if override.color is not None else color
    return label, color


def get_all_statuses(
    settings: LibrarySettings | None = None,
    builtin_defaults: Mapping[str, StatusAppearance] = BUILTIN_STATUS_INFO,
) -> list[Status]:
    """Return built-in statuses followed by custom statuses.

    Built-ins keep their enumeration order (``order`` 0-6); custom statuses
    use their saved ``order`` or ``100 + index`` and are sorted by it.
    """
    if settings is None:
        settings = LibrarySettings()
    status_config = settings.status_config

    builtins: list[Status] = []
    for index, status in enumerate(ReadingStatus):
        defaults = builtin_defaults.get(status.value)
        label, color = _resolve(
            status_config.get(status.value),
            (defaults.label if defaults and defaults.label else status.value),
            (defaults.color if defaults and defaults.color else DEFAULT_STATUS_COLOR),
        )
        builtins.append(
            Status(
                id=status.value,
                label=label,
                color=color,
                built_in=True,
                is_overlay_only=status is OVERLAY_STATUS,
                order=index,
            )
        )

    customs: list[Status] = []
    for index, custom in enumerate(settings.custom_statuses):
        label, color = _resolve(
            status_config.get(custom.id),
            custom.label,
            custom.color,
        )
        customs.append(
            Status(
                id=custom.id,
                label=label,
                color=color,
                built_in=False,
                is_overlay_only=False,
                order=custom.order if custom.order is not None else CUSTOM_ORDER_BASE + index,
            )
        )
    customs.sort(key=lambda s: s.order)

    return builtins + customs


def get_primary_statuses(
    settings: LibrarySettings | None = None,
    builtin_defaults: Mapping[str, StatusAppearance] = BUILTIN_STATUS_INFO,
) -> list[Status]:
    """Like :func:`get_all_statuses` but without the overlay-only status."""
    return [
        s for s in get_all_statuses(settings, builtin_defaults) if not s.is_overlay_only
    ]


def merge_status_config(
    saved: Mapping[str, StatusAppearance] | None = None,
    builtin_defaults: Mapping[str, StatusAppearance] = BUILTIN_STATUS_INFO,
) -> dict[str, StatusAppearance]:
    """Return the full label/color map for the built-ins with ``saved`` applied."""
    saved = saved or {}
    merged: dict[str, StatusAppearance] = {}
    for key, default in builtin_defaults.items():
        label, color = _resolve(
            saved.get(key),
            default.label or key,
            default.color or DEFAULT_STATUS_COLOR,
        )
        merged[str(key)] = StatusAppearance(label=label, color=color)
    return merged


def status_ids(statuses: Iterable[Status]) -> set[str]:
    return {s.id for s in statuses}
