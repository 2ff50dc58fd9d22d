"""Dose scheduling engine.

Pure functions that turn dose history into the next due time, the overdue
duration and today's dose quota. Every function takes ``now`` explicitly;
dose timestamps are epoch milliseconds and returned instants are aware
datetimes in ``now``'s timezone. Nothing here performs I/O.

Doses are spread evenly across the wake window rather than at a fixed
real-time interval, so a late start still leaves evenly spaced doses and
nothing is ever scheduled during sleep hours.
"""

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional, Sequence

from dose_tracker.utils.timezone import (
    from_timestamp_ms,
    get_day_bounds,
    start_of_day,
    to_timestamp_ms,
)

DOSES_PER_DAY = 5
WAKE_WINDOW_START_HOUR = 9
WAKE_WINDOW_END_HOUR = 23
SLEEP_GAP_HOURS = 6

DOSE_INTERVAL_MINUTES = (
    (WAKE_WINDOW_END_HOUR - WAKE_WINDOW_START_HOUR) * 60 // (DOSES_PER_DAY - 1)
)

# Reported by get_overdue_minutes when no dose was ever logged
NEVER_DOSED_OVERDUE_MINUTES = 999

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 60 * MS_PER_MINUTE


@dataclass(frozen=True)
class NextDoses:
    """The next due dose and the one after it."""

    next: datetime
    next_next: datetime


class OverdueState(str, Enum):
    NEVER = "never"
    ON_TIME = "on_time"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class OverdueStatus:
    """Unambiguous overdue report: ``minutes`` is 0 unless state is OVERDUE."""

    state: OverdueState
    minutes: int = 0


def is_first_dose_of_day(last_dose: Optional[int], now: datetime) -> bool:
    """Check whether the next dose opens a new waking period.

    A new waking period starts when there is no previous dose or at least
    ``SLEEP_GAP_HOURS`` have passed since it, regardless of midnight.
    """
    if last_dose is None:
        return True
    return to_timestamp_ms(now) - last_dose >= SLEEP_GAP_HOURS * MS_PER_HOUR


def _is_sleep_hour(moment: datetime) -> bool:
    return moment.hour >= WAKE_WINDOW_END_HOUR or moment.hour < WAKE_WINDOW_START_HOUR


def _next_wake_start(moment: datetime) -> datetime:
    """First wake-window start at or after ``moment``."""
    wake = datetime.combine(
        moment.date(), time(WAKE_WINDOW_START_HOUR), tzinfo=moment.tzinfo
    )
    if wake < moment:
        wake += timedelta(days=1)
    return wake


def _tomorrow_wake_start(now: datetime) -> datetime:
    tomorrow = now.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time(WAKE_WINDOW_START_HOUR), tzinfo=now.tzinfo)


def calculate_next_dose_time(
    last_dose: Optional[int],
    doses_today: Sequence[int],
    max_doses_today: int,
    now: datetime,
) -> datetime:
    """Calculate when the next dose is due.

    Args:
        last_dose: Timestamp of the most recent dose, or None
        doses_today: Today's dose timestamps in ascending order
        max_doses_today: Today's quota (see get_max_doses_for_today)
        now: Current aware datetime

    Returns:
        Due time in ``now``'s timezone
    """
    # No history, or a fresh waking period: take one right away
    if last_dose is None or is_first_dose_of_day(last_dose, now):
        return now

    if len(doses_today) >= max_doses_today:
        return _tomorrow_wake_start(now)

    candidate = from_timestamp_ms(
        last_dose + DOSE_INTERVAL_MINUTES * MS_PER_MINUTE, now.tzinfo
    )
    if _is_sleep_hour(candidate):
        return _next_wake_start(candidate)
    return candidate


def calculate_next_two_doses(
    last_dose: Optional[int],
    doses_today: Sequence[int],
    max_doses_today: int,
    now: datetime,
) -> NextDoses:
    """Preview the next two doses.

    The second one is found by simulating that the first was taken on
    time. Real history is left untouched.
    """
    next_dose = calculate_next_dose_time(last_dose, doses_today, max_doses_today, now)
    next_ms = to_timestamp_ms(next_dose)

    simulated_today = list(doses_today)
    day_start, day_end = get_day_bounds(now)
    if day_start <= next_ms <= day_end:
        simulated_today.append(next_ms)

    next_next = calculate_next_dose_time(next_ms, simulated_today, max_doses_today, now)
    return NextDoses(next=next_dose, next_next=next_next)


def calculate_first_day_max(first_dose: int, tz: tzinfo) -> int:
    """Quota for the very first day of use, shrunk for a mid-day start.

    Args:
        first_dose: Timestamp of the first dose ever
        tz: Local timezone used to read its time of day

    Returns:
        Number of doses achievable between the first dose and the end of
        the wake window, at least 1
    """
    taken_at = from_timestamp_ms(first_dose, tz)
    wake_start = start_of_day(taken_at) + timedelta(hours=WAKE_WINDOW_START_HOUR)
    wake_end = start_of_day(taken_at) + timedelta(hours=WAKE_WINDOW_END_HOUR)

    if taken_at <= wake_start:
        return DOSES_PER_DAY
    if taken_at >= wake_end:
        return 1

    minutes_since_wake = (taken_at - wake_start) / timedelta(minutes=1)
    slots_missed = math.ceil(minutes_since_wake / DOSE_INTERVAL_MINUTES)
    return max(1, DOSES_PER_DAY - slots_missed)


def get_max_doses_for_today(
    doses_today: Sequence[int],
    first_dose_ever: Optional[int],
    now: datetime,
) -> int:
    """Maximum number of doses schedulable today.

    Only day one of use gets a reduced quota; every other day, including a
    day with no doses yet, gets the full ``DOSES_PER_DAY``.
    """
    if first_dose_ever is None or not doses_today:
        return DOSES_PER_DAY

    if min(doses_today) == first_dose_ever:
        return calculate_first_day_max(first_dose_ever, now.tzinfo)

    return DOSES_PER_DAY


def get_overdue_minutes(
    last_dose: Optional[int],
    doses_today: Sequence[int],
    max_doses_today: int,
    now: datetime,
) -> int:
    """Whole minutes past the due time, or 0 if not yet due.

    Returns ``NEVER_DOSED_OVERDUE_MINUTES`` when no dose was ever logged;
    use get_overdue_state to tell that apart from a real delay.
    """
    status = get_overdue_state(last_dose, doses_today, max_doses_today, now)
    if status.state is OverdueState.NEVER:
        return NEVER_DOSED_OVERDUE_MINUTES
    return status.minutes


def get_overdue_state(
    last_dose: Optional[int],
    doses_today: Sequence[int],
    max_doses_today: int,
    now: datetime,
) -> OverdueStatus:
    if last_dose is None:
        return OverdueStatus(OverdueState.NEVER)

    next_due = calculate_next_dose_time(last_dose, doses_today, max_doses_today, now)
    if now <= next_due:
        return OverdueStatus(OverdueState.ON_TIME)

    late_ms = to_timestamp_ms(now) - to_timestamp_ms(next_due)
    return OverdueStatus(OverdueState.OVERDUE, late_ms // MS_PER_MINUTE)


def is_dose_overdue(
    last_dose: Optional[int],
    doses_today: Sequence[int],
    max_doses_today: int,
    now: datetime,
) -> bool:
    """True when the due time has passed or no dose was ever taken."""
    if last_dose is None:
        return True
    return now > calculate_next_dose_time(last_dose, doses_today, max_doses_today, now)


def format_time_until(target: datetime, now: datetime) -> str:
    """Render a countdown like "in 1h 5m" or "1h 35m overdue"."""
    diff_ms = to_timestamp_ms(target) - to_timestamp_ms(now)

    if diff_ms < 0:
        overdue_mins = abs(diff_ms // MS_PER_MINUTE)
        if overdue_mins < 60:
            return f"{overdue_mins}m overdue"
        hours, mins = divmod(overdue_mins, 60)
        return f"{hours}h {mins}m overdue"

    total_mins = diff_ms // MS_PER_MINUTE
    if total_mins < 60:
        return f"in {total_mins}m"
    hours, mins = divmod(total_mins, 60)
    return f"in {hours}h {mins}m"


def format_time_ago(timestamp: int, now: datetime) -> str:
    """Render elapsed time like "just now", "1h 30m ago" or "2d ago"."""
    diff_mins = (to_timestamp_ms(now) - timestamp) // MS_PER_MINUTE

    if diff_mins < 1:
        return "just now"
    if diff_mins < 60:
        return f"{diff_mins}m ago"

    hours, mins = divmod(diff_mins, 60)
    if hours < 24:
        return f"{hours}h {mins}m ago" if mins > 0 else f"{hours}h ago"

    return f"{hours // 24}d ago"


def format_time(moment: datetime) -> str:
    """Render a 12-hour clock time like "9:05 AM"."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"
