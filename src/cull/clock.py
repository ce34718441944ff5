"""Whole-day age arithmetic."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def days_between(reference: datetime, mtime: datetime) -> int:
    """Return the number of whole days from ``mtime`` to ``reference``.

    Partial days are floored, so a timestamp later than ``reference`` gives a
    negative result.
    """
    return (reference - mtime) // ONE_DAY


def from_timestamp(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)
