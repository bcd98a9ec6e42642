"""CLI command modules for shelfwise."""

from . import evaluate, rules, statuses, validate

__all__ = ["evaluate", "rules", "statuses", "validate"]
