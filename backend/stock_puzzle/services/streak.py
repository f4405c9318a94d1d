"""Streak derivation from yesterday's and today's prediction records.

Only strict yesterday/today adjacency is consulted. A user returning after
missing one or more days sees no record for yesterday, so their next
submission starts again at 1. Nothing here ever lowers a stored streak.
"""

from __future__ import annotations

import math
from typing import Any


def stored_streak(record: Any | None) -> int | None:
    """Return the numeric streak stored on ``record`` or ``None``."""

    if record is None:
        return None
    value = getattr(record, "streak", None)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def yesterday_streak(yesterday: Any | None) -> int:
    return stored_streak(yesterday) or 0


def displayed_streak(today: Any | None, yesterday: Any | None) -> int:
    """Streak to show for the current day."""

    if today is not None:
        value = stored_streak(today)
        if value is not None:
            return value
        return yesterday_streak(yesterday) + 1
    return yesterday_streak(yesterday)


def next_streak(yesterday: Any | None) -> int:
    """Streak to persist with today's submission."""

    return yesterday_streak(yesterday) + 1


__all__ = ["stored_streak", "yesterday_streak", "displayed_streak", "next_streak"]
