"""Read tracked works from a library export.

The export is a JSON file holding either a mapping of work id to record or
a list of records that each carry an ``id``. Only the fields the status
engine needs are read; everything else in a record is ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from shelfwise.status.models import TrackedWork

logger = logging.getLogger(__name__)


class LibraryError(RuntimeError):
    """Raised when a library export cannot be read."""


def _records(data: Any) -> list[tuple[str, Any]]:
    if isinstance(data, dict):
        # Storage dumps nest the map as {"rg_novel_library": {"novels": {...}}}.
        for key in ("rg_novel_library", "novels"):
            if isinstance(data.get(key), (dict, list)):
                return _records(data[key])
        return [(str(key), value) for key, value in data.items()]
    if isinstance(data, list):
        records = []
        for index, record in enumerate(data):
            if not isinstance(record, dict) or record.get("id") is None:
                raise LibraryError(f"Library entry #{index} has no id")
            records.append((str(record["id"]), record))
        return records
    raise LibraryError("Library export must be a JSON object or array")


def load_works(path: Path) -> dict[str, TrackedWork]:
    """Load tracked works keyed by id.

    Raises :class:`LibraryError` on I/O errors, invalid JSON, or records
    that are not JSON objects.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise LibraryError(f"Cannot read library file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise LibraryError(f"Invalid JSON in {path}: {exc}") from exc

    works: dict[str, TrackedWork] = {}
    for work_id, record in _records(data):
        if not isinstance(record, dict):
            raise LibraryError(f"Library entry {work_id} is not an object")
        works[work_id] = TrackedWork.from_dict(record)
    logger.info("Loaded %d tracked works from %s", len(works), path)
    return works


__all__ = ["LibraryError", "load_works"]
