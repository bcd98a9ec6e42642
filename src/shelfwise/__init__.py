"""shelfwise - automatic reading-status transitions for a reading tracker."""

__version__ = "0.1.0"
