"""Tracker of source images already converted to the optimized format.

The tracker is a JSON array of source filenames kept next to the
source images. It is read once at the start of a run and rewritten
once at the end. There is no locking and no atomic replace: the
pipeline runs as a single process.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def load_tracker(path: str | Path) -> set[str]:
    """Read the set of already optimized filenames.

    A missing file is the normal first-run state. Any other failure
    (permissions, malformed JSON, wrong shape) is logged and also
    treated as an empty tracker, so the run reprocesses everything
    instead of aborting.

    Args:
        path: Location of the tracker JSON file.

    Returns:
        Set of source filenames.
    """
    tracker_path = Path(path)
    try:
        with open(tracker_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return set()
    except (OSError, ValueError) as e:
        logger.error("Error reading tracker file %s: %s", tracker_path, e)
        return set()

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        logger.error(
            "Error reading tracker file %s: expected a JSON array of filenames",
            tracker_path,
        )
        return set()

    return set(data)


def save_tracker(path: str | Path, tracked: set[str]) -> None:
    """Overwrite the tracker file with the given filenames.

    Order follows set iteration order. Errors propagate to the caller.
    """
    tracker_path = Path(path)
    with open(tracker_path, "w", encoding="utf-8") as f:
        json.dump(list(tracked), f, indent=2, ensure_ascii=False)
    logger.debug("Saved %d tracker entries to %s", len(tracked), tracker_path)
