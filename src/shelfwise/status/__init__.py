"""Reading-status rule engine.

Public API surface -- all consumers import from this package.
"""

from .models import (
    DEFAULT_PRIORITY,
    WILDCARD,
    ChapterReadConditions,
    ChapterReadContext,
    CustomStatus,
    InactivityConditions,
    LibrarySettings,
    OverlayConfig,
    ReadingStatus,
    Rule,
    RulePatch,
    Status,
    StatusAppearance,
    TrackedWork,
    Trigger,
)
from .catalog import (
    BUILTIN_RULE_IDS,
    DEFAULT_AUTO_HOLD_DAYS,
    generate_id,
    get_builtin_rules,
    is_builtin_rule_id,
    new_custom_rule,
)
from .merge import merge_rules, sort_rules
from .registry import (
    BUILTIN_STATUS_INFO,
    get_all_statuses,
    get_primary_statuses,
    merge_status_config,
)
from .evaluate import (
    TransitionDecision,
    evaluate_chapter_read_transitions,
    evaluate_inactivity_transitions,
    explain_chapter_read,
    explain_inactivity,
)
from .overlay import apply_rereading_auto_clear, default_rereading_overlay
from .validate import ValidationResult, validate_settings

__all__ = [
    "BUILTIN_RULE_IDS",
    "BUILTIN_STATUS_INFO",
    "ChapterReadConditions",
    "ChapterReadContext",
    "CustomStatus",
    "DEFAULT_AUTO_HOLD_DAYS",
    "DEFAULT_PRIORITY",
    "InactivityConditions",
    "LibrarySettings",
    "OverlayConfig",
    "ReadingStatus",
    "Rule",
    "RulePatch",
    "Status",
    "StatusAppearance",
    "TrackedWork",
    "TransitionDecision",
    "Trigger",
    "ValidationResult",
    "WILDCARD",
    "apply_rereading_auto_clear",
    "default_rereading_overlay",
    "evaluate_chapter_read_transitions",
    "evaluate_inactivity_transitions",
    "explain_chapter_read",
    "explain_inactivity",
    "generate_id",
    "get_all_statuses",
    "get_builtin_rules",
    "get_primary_statuses",
    "is_builtin_rule_id",
    "merge_rules",
    "merge_status_config",
    "new_custom_rule",
    "sort_rules",
    "validate_settings",
]
