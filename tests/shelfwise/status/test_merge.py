"""Tests for the built-in catalog and the rule merger."""

from __future__ import annotations

import logging

import pytest

from shelfwise.status.catalog import (
    BUILTIN_RULE_IDS,
    CHAPTER_COMPLETE,
    CHAPTER_FROM_UTD,
    CHAPTER_UPTODATE,
    INACTIVITY_HOLD,
    INACTIVITY_PLAN,
    generate_id,
    get_builtin_rules,
    is_builtin_rule_id,
    new_custom_rule,
)
from shelfwise.status.evaluate import evaluate_inactivity_transitions
from shelfwise.status.merge import merge_rules, sort_rules
from shelfwise.status.models import (
    ChapterReadConditions,
    InactivityConditions,
    LibrarySettings,
    Rule,
    TrackedWork,
)


def _by_id(rules: list[Rule]) -> dict[str, Rule]:
    return {r.id: r for r in rules}


class TestCatalog:
    def test_five_builtin_rules(self) -> None:
        rules = get_builtin_rules()
        assert [r.id for r in rules] == list(BUILTIN_RULE_IDS)
        assert all(r.built_in and r.enabled for r in rules)

    def test_fresh_copy_each_call(self) -> None:
        first = get_builtin_rules()
        second = get_builtin_rules()
        assert first == second
        assert first is not second
        first.pop()
        assert len(get_builtin_rules()) == 5

    def test_inactivity_placeholder_days(self) -> None:
        rules = _by_id(get_builtin_rules())
        assert rules[INACTIVITY_HOLD].conditions.inactivity_days == 0
        assert rules[INACTIVITY_PLAN].conditions.inactivity_days == 0

    def test_chapter_rules_encode_expected_transitions(self) -> None:
        rules = _by_id(get_builtin_rules())
        complete = rules[CHAPTER_COMPLETE]
        assert complete.from_statuses == ("reading", "up-to-date")
        assert complete.exclude_statuses == ("completed", "dropped")
        assert complete.to_status == "completed"
        assert rules[CHAPTER_UPTODATE].to_status == "up-to-date"
        assert rules[CHAPTER_FROM_UTD].from_statuses == ("up-to-date",)
        assert rules[CHAPTER_FROM_UTD].conditions == ChapterReadConditions(
            require_latest_chapter=False, require_story_complete=None
        )

    def test_is_builtin_rule_id(self) -> None:
        assert is_builtin_rule_id(INACTIVITY_HOLD)
        assert not is_builtin_rule_id("rule-custom")

    def test_generate_id_prefix_and_uniqueness(self) -> None:
        ids = {generate_id("rule") for _ in range(20)}
        assert len(ids) == 20
        assert all(i.startswith("rule-") for i in ids)

    def test_new_custom_rule_defaults(self) -> None:
        rule = new_custom_rule()
        assert rule.id.startswith("rule-")
        assert rule.built_in is False
        assert rule.enabled is True
        assert rule.trigger == "chapterRead"
        assert rule.from_statuses == ("reading",)
        assert rule.priority == 10
        assert rule.conditions == ChapterReadConditions()


class TestInactivityPatching:
    def test_auto_hold_days_patched(self) -> None:
        rules = _by_id(merge_rules([], LibrarySettings(auto_hold_days=14)))
        assert rules[INACTIVITY_HOLD].conditions.inactivity_days == 14
        assert rules[INACTIVITY_PLAN].conditions.inactivity_days == 14

    def test_default_days_without_settings(self) -> None:
        rules = _by_id(merge_rules(None))
        assert rules[INACTIVITY_HOLD].conditions.inactivity_days == 7

    def test_other_conditions_survive_patch(self) -> None:
        rules = _by_id(merge_rules([], LibrarySettings()))
        assert rules[INACTIVITY_HOLD].conditions.chapters_read_min == 2
        assert rules[INACTIVITY_PLAN].conditions.chapters_read_max == 1

    def test_auto_hold_disabled_forces_inactivity_off(self) -> None:
        saved = [
            {"id": INACTIVITY_HOLD, "enabled": True},
            {"id": INACTIVITY_PLAN, "enabled": True},
        ]
        rules = merge_rules(saved, LibrarySettings(auto_hold_enabled=False))
        inactivity = [r for r in rules if r.trigger == "inactivity" and r.built_in]
        assert len(inactivity) == 2
        assert all(not r.enabled for r in inactivity)

    def test_auto_hold_disabled_leaves_custom_inactivity_rules(self) -> None:
        saved = [
            {
                "id": "rule-custom",
                "enabled": True,
                "trigger": "inactivity",
                "fromStatuses": ["plan-to-read"],
                "toStatus": "dropped",
            }
        ]
        rules = _by_id(merge_rules(saved, LibrarySettings(auto_hold_enabled=False)))
        assert rules["rule-custom"].enabled is True

    def test_auto_hold_disabled_leaves_chapter_rules(self) -> None:
        rules = merge_rules([], LibrarySettings(auto_hold_enabled=False))
        assert all(r.enabled for r in rules if r.trigger == "chapterRead")


class TestOverrides:
    def test_override_applies_whitelisted_fields(self) -> None:
        saved = [
            {
                "id": CHAPTER_UPTODATE,
                "enabled": False,
                "name": "Caught up",
                "description": "custom text",
                "priority": 99,
                "conditions": {"requireLatestChapter": True, "requireStoryComplete": None},
            }
        ]
        rule = _by_id(merge_rules(saved, LibrarySettings()))[CHAPTER_UPTODATE]
        assert rule.enabled is False
        assert rule.name == "Caught up"
        assert rule.description == "custom text"
        assert rule.priority == 99
        assert rule.conditions == ChapterReadConditions(
            require_latest_chapter=True, require_story_complete=None
        )

    def test_identity_fields_cannot_be_overridden(self) -> None:
        saved = [
            {
                "id": CHAPTER_COMPLETE,
                "builtIn": False,
                "trigger": "inactivity",
                "fromStatuses": ["*"],
                "excludeStatuses": [],
                "toStatus": "dropped",
            }
        ]
        rule = _by_id(merge_rules(saved, LibrarySettings()))[CHAPTER_COMPLETE]
        assert rule.built_in is True
        assert rule.trigger == "chapterRead"
        assert rule.from_statuses == ("reading", "up-to-date")
        assert rule.exclude_statuses == ("completed", "dropped")
        assert rule.to_status == "completed"

    def test_override_conditions_replace_builtin_conditions(self) -> None:
        saved = [{"id": INACTIVITY_HOLD, "conditions": {"inactivityDays": 30}}]
        rule = _by_id(merge_rules(saved, LibrarySettings(auto_hold_days=7)))[INACTIVITY_HOLD]
        assert rule.conditions == InactivityConditions(
            inactivity_days=30, chapters_read_min=None, chapters_read_max=None
        )

    def test_override_without_days_has_no_idle_threshold(self) -> None:
        saved = [{"id": INACTIVITY_HOLD, "conditions": {"chaptersReadMin": 5}}]
        rules = merge_rules(saved, LibrarySettings(auto_hold_days=7))
        assert _by_id(rules)[INACTIVITY_HOLD].conditions == InactivityConditions(
            inactivity_days=None, chapters_read_min=5, chapters_read_max=None
        )

        now = 1_770_552_000_000
        work = TrackedWork(reading_status="reading", last_read_chapter=6, last_accessed_at=now)
        assert evaluate_inactivity_transitions(work, rules, now=now) == "on-hold"

    def test_override_without_conditions_keeps_patched_days(self) -> None:
        saved = [{"id": INACTIVITY_HOLD, "priority": 50}]
        rule = _by_id(merge_rules(saved, LibrarySettings(auto_hold_days=14)))[INACTIVITY_HOLD]
        assert rule.conditions.inactivity_days == 14
        assert rule.conditions.chapters_read_min == 2

    def test_builtins_never_deleted(self) -> None:
        rules = merge_rules([{"id": INACTIVITY_HOLD, "deleted": True}], LibrarySettings())
        assert {r.id for r in rules} >= set(BUILTIN_RULE_IDS)

    def test_saved_rules_are_not_mutated(self) -> None:
        saved = [{"id": CHAPTER_UPTODATE, "enabled": False}]
        merge_rules(saved, LibrarySettings(auto_hold_enabled=False))
        assert saved == [{"id": CHAPTER_UPTODATE, "enabled": False}]


class TestCustomRules:
    def test_custom_rules_appended(self) -> None:
        saved = [
            {
                "id": "rule-a",
                "name": "A",
                "enabled": True,
                "trigger": "chapterRead",
                "fromStatuses": ["on-hold"],
                "toStatus": "reading",
                "priority": 15,
                "conditions": {},
            }
        ]
        rules = merge_rules(saved, LibrarySettings())
        assert len(rules) == 6
        custom = _by_id(rules)["rule-a"]
        assert custom.built_in is False
        assert custom.from_statuses == ("on-hold",)

    def test_malformed_entries_skipped_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="shelfwise.status.merge"):
            rules = merge_rules(["junk", {"name": "no id"}, None], LibrarySettings())
        assert len(rules) == 5
        assert "without an id" in caplog.text


class TestOrdering:
    def test_sorted_by_priority_descending(self) -> None:
        saved = [
            {"id": "rule-low", "trigger": "chapterRead", "toStatus": "reading", "priority": 1},
            {"id": "rule-high", "trigger": "chapterRead", "toStatus": "reading", "priority": 100},
            {"id": "rule-bad", "trigger": "chapterRead", "toStatus": "reading", "priority": "x"},
        ]
        rules = merge_rules(saved, LibrarySettings())
        priorities = [r.priority for r in rules]
        assert priorities == sorted(priorities, reverse=True)
        assert rules[0].id == "rule-high"
        assert rules[-1].id == "rule-low"

    def test_tie_break_builtins_first_then_id(self) -> None:
        saved = [
            {"id": "rule-b", "trigger": "chapterRead", "toStatus": "reading", "priority": 30},
            {"id": "rule-a", "trigger": "chapterRead", "toStatus": "reading", "priority": 30},
        ]
        rules = merge_rules(saved, LibrarySettings())
        assert [r.id for r in rules[:3]] == [CHAPTER_COMPLETE, "rule-a", "rule-b"]

    def test_order_independent_of_input_order(self) -> None:
        saved = [
            {"id": "rule-b", "trigger": "inactivity", "toStatus": "dropped", "priority": 20},
            {"id": "rule-a", "trigger": "inactivity", "toStatus": "dropped", "priority": 20},
        ]
        forward = [r.id for r in merge_rules(saved, LibrarySettings())]
        backward = [r.id for r in merge_rules(list(reversed(saved)), LibrarySettings())]
        assert forward == backward

    def test_equal_priority_builtins_sorted_by_id(self) -> None:
        rules = sort_rules(get_builtin_rules())
        twenties = [r.id for r in rules if r.priority == 20]
        assert twenties == sorted([CHAPTER_UPTODATE, INACTIVITY_HOLD])

    def test_non_finite_priority_sorts_as_default(self) -> None:
        saved = [
            {"id": "rule-nan", "trigger": "chapterRead", "toStatus": "reading", "priority": float("nan")},
            {"id": CHAPTER_COMPLETE, "priority": float("inf")},
        ]
        rules = merge_rules(saved, LibrarySettings())
        priorities = [r.priority for r in rules]
        assert priorities == sorted(priorities, reverse=True)
        assert _by_id(rules)["rule-nan"].priority == 10
        assert _by_id(rules)[CHAPTER_COMPLETE].priority == 10
