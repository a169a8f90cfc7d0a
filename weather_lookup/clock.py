"""
Time helpers shared by the rate limiter, cache and payload stamping.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current local time as an aware datetime."""
    return datetime.now().astimezone()


def next_local_midnight(now: datetime) -> datetime:
    """Return the first midnight strictly after ``now`` in its own timezone."""
    tomorrow = now + timedelta(days=1)
    return tomorrow.replace(hour=0, minute=0, second=0, microsecond=0)


def to_iso(moment: datetime) -> str:
    """Format as UTC ISO-8601 with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
