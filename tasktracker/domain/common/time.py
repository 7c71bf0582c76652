from __future__ import annotations

import math
from datetime import datetime
from typing import Optional


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt


def to_iso(dt: datetime) -> str:
    ensure_aware(dt)
    # store as ISO 8601 with offset
    return dt.isoformat()


def from_iso(s: str) -> datetime:
    return datetime.fromisoformat(s)


def from_iso_opt(s: Optional[str]) -> Optional[datetime]:
    return from_iso(s) if s else None


def whole_seconds_between(start: datetime, end: datetime) -> int:
    """
    Whole seconds from start to end, floored.
    A wall clock that moved backwards yields 0, never a negative value.
    """
    ensure_aware(start)
    ensure_aware(end)
    delta = (end - start).total_seconds()
    if delta <= 0:
        return 0
    return int(math.floor(delta))
