"""Shared fixtures for rule engine tests."""

from __future__ import annotations

from typing import Callable

import pytest

from shelfwise.status.evaluate import MS_PER_DAY
from shelfwise.status.merge import merge_rules
from shelfwise.status.models import LibrarySettings, Rule, TrackedWork

# 2026-02-08T12:00:00Z
NOW_MS = 1_770_552_000_000


@pytest.fixture
def now_ms() -> int:
    return NOW_MS


@pytest.fixture
def default_settings() -> LibrarySettings:
    return LibrarySettings(auto_hold_days=7, auto_hold_enabled=True)


@pytest.fixture
def default_rules(default_settings: LibrarySettings) -> list[Rule]:
    return merge_rules([], default_settings)


@pytest.fixture
def make_work() -> Callable[..., TrackedWork]:
    """Build a TrackedWork last accessed ``days_ago`` days before NOW_MS."""

    def _make(
        status: str = "reading",
        *,
        days_ago: float | None = None,
        last_read_chapter: float = 0,
        current_chapter: float = 0,
        rereading: bool = False,
    ) -> TrackedWork:
        accessed = None if days_ago is None else int(NOW_MS - days_ago * MS_PER_DAY)
        return TrackedWork(
            reading_status=status,
            rereading_flag=rereading,
            last_read_chapter=last_read_chapter,
            current_chapter=current_chapter,
            last_accessed_at=accessed,
        )

    return _make
