"""Time-of-day arithmetic for the daily notification timers."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

MILLISECONDS_PER_DAY = 86_400_000


def next_occurrence(hour: int, now: Optional[datetime] = None) -> datetime:
    """Next HH:00:00.000 at or after ``now`` (today if still ahead, else tomorrow)."""
    now = now or datetime.now()
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target < now:
        target += timedelta(days=1)
    return target


def milliseconds_until(hour: int, now: Optional[datetime] = None) -> int:
    """
    Milliseconds from ``now`` until the next occurrence of ``hour`` o'clock.

    Sub-millisecond remainders round up, so ``now + result`` never falls
    short of the hour. Hours outside 0-23 return 0; callers are expected to
    validate the hour themselves.
    """
    if not 0 <= hour <= 23:
        return 0
    now = now or datetime.now()
    delta = next_occurrence(hour, now) - now
    return delta.days * MILLISECONDS_PER_DAY + delta.seconds * 1000 + -(-delta.microseconds // 1000)
