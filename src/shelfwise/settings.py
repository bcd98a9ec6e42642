"""Library settings file helpers.

Settings live in a YAML file (``shelfwise.yaml`` by default). A JSON export
of the tracker's settings also loads, since JSON is valid YAML. Keys use the
tracker's camelCase names (``autoHoldDays``, ``stateMachineRules``, ...).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from shelfwise.status.models import CustomStatus, LibrarySettings, Rule

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "shelfwise.yaml"
SETTINGS_ENV_VAR = "SHELFWISE_SETTINGS"

RULES_KEY = "stateMachineRules"
CUSTOM_STATUSES_KEY = "customStatuses"


class SettingsError(RuntimeError):
    """Raised when the settings file cannot be parsed."""


def settings_path(explicit: Path | None = None) -> Path:
    """Resolve the settings file: explicit path, env var, then cwd default."""
    if explicit is not None:
        return explicit
    env_value = os.environ.get(SETTINGS_ENV_VAR, "").strip()
    if env_value:
        return Path(env_value)
    return Path.cwd() / SETTINGS_FILENAME


def _read_raw(path: Path) -> dict[str, Any]:
    yaml = YAML()
    yaml.preserve_quotes = True
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except (OSError, YAMLError) as exc:
        logger.error("Failed to load settings: %s", exc)
        raise SettingsError(f"Invalid settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(
            f"Invalid settings file {path}: expected a mapping at the top level"
        )
    return data


def load_settings(path: Path) -> LibrarySettings:
    """Load library settings, falling back to defaults if the file is missing."""
    if not path.exists():
        logger.warning("Settings file not found: %s", path)
        return LibrarySettings()
    settings = LibrarySettings.from_dict(_read_raw(path))
    logger.info(
        "Loaded settings from %s (%d saved rules, %d custom statuses)",
        path,
        len(settings.state_machine_rules),
        len(settings.custom_statuses),
    )
    return settings


def _append_entry(path: Path, key: str, entry: dict[str, Any]) -> None:
    """Append ``entry`` to the list under ``key``, leaving the rest of the file as is."""
    data: dict[str, Any] = _read_raw(path) if path.exists() else {}
    entries = data.setdefault(key, [])
    if entries is None:
        entries = data[key] = []
    if not isinstance(entries, list):
        raise SettingsError(
            f"Invalid settings file {path}: {key} must be a list, not {type(entries).__name__}"
        )
    entries.append(entry)

    path.parent.mkdir(parents=True, exist_ok=True)
    yaml = YAML()
    yaml.preserve_quotes = True
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)

    logger.info("Added %s entry %s to %s", key, entry.get("id"), path)


def add_saved_rule(path: Path, rule: Rule) -> None:
    """Append a custom rule to ``stateMachineRules``."""
    _append_entry(path, RULES_KEY, rule.to_dict())


def add_custom_status(path: Path, status: CustomStatus) -> None:
    """Append a custom status to ``customStatuses``."""
    _append_entry(path, CUSTOM_STATUSES_KEY, status.to_dict())


__all__ = [
    "SETTINGS_ENV_VAR",
    "SETTINGS_FILENAME",
    "SettingsError",
    "add_custom_status",
    "add_saved_rule",
    "load_settings",
    "settings_path",
]
