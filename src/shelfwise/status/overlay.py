"""Re-reading overlay management.

The re-reading flag is orthogonal to the primary status and can accompany
any of them. It is cleared automatically when a work moves into one of the
overlay's ``auto_clear_on`` statuses.
"""

from __future__ import annotations

import logging

from .models import OverlayConfig, TrackedWork

logger = logging.getLogger(__name__)


def default_rereading_overlay() -> OverlayConfig:
    """Return the default re-reading overlay configuration."""
    return OverlayConfig()


def apply_rereading_auto_clear(
    work: TrackedWork,
    new_status: str | None,
    overlay_config: OverlayConfig | None,
) -> bool:
    """Clear ``work.rereading_flag`` if ``new_status`` is an auto-clear target.

    Mutates ``work`` in place; the caller persists it together with the
    status change. Returns whether the flag was cleared.
    """
    if not work.rereading_flag:
        return False
    if overlay_config is None or not overlay_config.enabled:
        return False
    if new_status in overlay_config.auto_clear_on:
        work.rereading_flag = False
        logger.debug("Cleared re-reading flag on transition to %s", new_status)
        return True
    return False
