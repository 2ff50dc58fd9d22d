"""Shared time helpers for tests.

All tests run in a fixed +03:00 timezone so "today" and the wake window
are independent of the machine running them.
"""

from datetime import datetime, timedelta, timezone

from dose_tracker.utils.timezone import to_timestamp_ms

TZ_OFFSET = "+03:00"
TZ = timezone(timedelta(hours=3))
CHAT_ID = "424242"


def at(day: int, hour: int, minute: int = 0, second: int = 0, ms: int = 0) -> datetime:
    """Local datetime in January 2024."""
    return datetime(2024, 1, day, hour, minute, second, ms * 1000, tzinfo=TZ)


def ms(moment: datetime) -> int:
    return to_timestamp_ms(moment)
