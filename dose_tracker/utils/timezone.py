"""Timezone and epoch-millisecond helpers for the dose tracker."""

from datetime import datetime, time, timedelta, timezone
from typing import Optional

from loguru import logger

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


def parse_timezone_offset(offset_str: str) -> timedelta:
    """Parse timezone offset string to timedelta.

    Args:
        offset_str: Timezone offset in format "+03:00" or "-05:00"

    Returns:
        timedelta representing the offset

    Raises:
        ValueError: If offset string format is invalid

    Examples:
        >>> parse_timezone_offset("+03:00")
        datetime.timedelta(seconds=10800)
        >>> parse_timezone_offset("-05:30")
        datetime.timedelta(days=-1, seconds=66600)
    """
    try:
        offset_str = offset_str.strip()

        if len(offset_str) != 6 or offset_str[0] not in ['+', '-']:
            raise ValueError(f"Invalid timezone offset format: {offset_str}")

        sign = 1 if offset_str[0] == '+' else -1

        hours_str, minutes_str = offset_str[1:].split(':')
        hours = int(hours_str)
        minutes = int(minutes_str)

        if not (0 <= hours <= 14):
            raise ValueError(f"Hours out of range: {hours}")
        if not (0 <= minutes <= 59):
            raise ValueError(f"Minutes out of range: {minutes}")

        total_minutes = sign * (hours * 60 + minutes)
        return timedelta(minutes=total_minutes)

    except (ValueError, IndexError) as e:
        logger.error(f"Failed to parse timezone offset '{offset_str}': {e}")
        raise ValueError(f"Invalid timezone offset format: {offset_str}") from e


def get_timezone(offset_str: str) -> timezone:
    """Build a fixed-offset tzinfo from an offset string like "+03:00"."""
    return timezone(parse_timezone_offset(offset_str))


def get_local_now(timezone_offset: str) -> datetime:
    """Get current time as an aware datetime in the configured timezone.

    This is the only place the wall clock is read; everything downstream
    receives ``now`` explicitly.

    Args:
        timezone_offset: Timezone offset (e.g., "+03:00", "-05:00")

    Returns:
        Current aware datetime in that timezone
    """
    return datetime.now(timezone.utc).astimezone(get_timezone(timezone_offset))


def to_timestamp_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return (moment - EPOCH) // ONE_MS


def from_timestamp_ms(timestamp: int, tz: Optional[timezone] = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in ``tz`` (UTC by default)."""
    moment = EPOCH + timedelta(milliseconds=timestamp)
    return moment.astimezone(tz or timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day containing ``moment``."""
    return datetime.combine(moment.date(), time(0, 0), tzinfo=moment.tzinfo)


def get_day_bounds(now: datetime) -> tuple[int, int]:
    """Get the local calendar day containing ``now`` as epoch milliseconds.

    Returns:
        Tuple of (start, end) where start is 00:00:00.000 and end is
        23:59:59.999, both inclusive
    """
    start = start_of_day(now)
    end = start + timedelta(days=1) - ONE_MS
    return to_timestamp_ms(start), to_timestamp_ms(end)
