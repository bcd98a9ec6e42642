"""Tests for loading and saving the settings file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from shelfwise.settings import (
    SETTINGS_ENV_VAR,
    SETTINGS_FILENAME,
    SettingsError,
    add_custom_status,
    add_saved_rule,
    load_settings,
    settings_path,
)
from shelfwise.status.catalog import new_custom_rule
from shelfwise.status.models import CustomStatus, LibrarySettings


class TestSettingsPath:
    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "env.yaml"))
        assert settings_path(tmp_path / "given.yaml") == tmp_path / "given.yaml"

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "env.yaml"))
        assert settings_path() == tmp_path / "env.yaml"

    def test_cwd_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        assert settings_path() == tmp_path / SETTINGS_FILENAME


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings == LibrarySettings()

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text(
            "autoHoldDays: 14\n"
            "autoHoldEnabled: false\n"
            "stateMachineRules:\n"
            "  - id: builtin-chapter-uptodate\n"
            "    enabled: false\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.auto_hold_days == 14
        assert settings.auto_hold_enabled is False
        assert settings.state_machine_rules[0]["enabled"] is False

    def test_json_export_loads(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"autoHoldDays": 3}), encoding="utf-8")
        assert load_settings(path).auto_hold_days == 3

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text("autoHoldDays: [unclosed\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="Invalid settings file"):
            load_settings(path)

    def test_non_mapping_root_raises(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="mapping"):
            load_settings(path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == LibrarySettings()


class TestAppendEntries:
    def test_add_rule_to_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / SETTINGS_FILENAME
        rule = new_custom_rule("Drop", to_status="dropped")
        add_saved_rule(path, rule)

        data = YAML().load(path.read_text(encoding="utf-8"))
        assert list(data) == ["stateMachineRules"]
        assert data["stateMachineRules"][0]["id"] == rule.id

    def test_add_status_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        status = CustomStatus(id="status-a", label="Wishlist", order=100)
        add_custom_status(path, status)
        assert load_settings(path).custom_statuses == [status]

    def test_unparsed_and_unrelated_data_survives(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text(
            "theme: dark\n"
            'autoHoldDays: "14"\n'
            "customStatuses:\n"
            "  - label: orphan\n"
            "stateMachineRules:\n"
            "  - junk\n",
            encoding="utf-8",
        )
        add_saved_rule(path, new_custom_rule("New"))
        add_custom_status(path, CustomStatus(id="status-b", label="B"))

        data = YAML().load(path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert data["autoHoldDays"] == "14"
        assert data["customStatuses"][0] == {"label": "orphan"}
        assert data["customStatuses"][1]["id"] == "status-b"
        assert data["stateMachineRules"][0] == "junk"
        assert len(data["stateMachineRules"]) == 2
        assert "rereadingOverlay" not in data

    def test_non_list_section_is_left_alone(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        original = "stateMachineRules: oops\n"
        path.write_text(original, encoding="utf-8")
        with pytest.raises(SettingsError, match="must be a list"):
            add_saved_rule(path, new_custom_rule())
        assert path.read_text(encoding="utf-8") == original

    def test_null_section_becomes_list(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILENAME
        path.write_text("customStatuses:\n", encoding="utf-8")
        add_custom_status(path, CustomStatus(id="status-a", label="A"))
        assert [s.id for s in load_settings(path).custom_statuses] == ["status-a"]
