"""Data models for the dose tracker."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dose_tracker.services.schedule import (
    format_time,
    format_time_ago,
    format_time_until,
)
from dose_tracker.utils.timezone import from_timestamp_ms, to_timestamp_ms


@dataclass
class DoseStatus:
    """Snapshot of the schedule at a given moment.

    Attributes:
        now: Moment the snapshot was computed for (aware, local timezone)
        last_dose: Epoch milliseconds of the latest dose or None
        next_dose: When the next dose is due
        next_next_dose: When the dose after that is due
        doses_today: Today's dose timestamps, oldest first
        max_doses_today: Today's dose quota
        overdue_minutes: Whole minutes past due (999 if never dosed)
    """

    now: datetime
    last_dose: Optional[int]
    next_dose: datetime
    next_next_dose: datetime
    doses_today: list[int] = field(default_factory=list)
    max_doses_today: int = 5
    overdue_minutes: int = 0

    @property
    def is_overdue(self) -> bool:
        return self.overdue_minutes > 0

    def to_dict(self) -> dict:
        """Convert status to the JSON shape served by ``GET /api/dose``.

        Returns:
            Dictionary with camelCase keys and pre-rendered time strings
        """
        last_dose = None
        if self.last_dose is not None:
            last_dose = {
                "timestamp": self.last_dose,
                "timeAgo": format_time_ago(self.last_dose, self.now),
                "formatted": format_time(
                    from_timestamp_ms(self.last_dose, self.now.tzinfo)
                ),
            }

        return {
            "lastDose": last_dose,
            "nextDose": {
                "timestamp": to_timestamp_ms(self.next_dose),
                "formatted": format_time(self.next_dose),
                "timeUntil": format_time_until(self.next_dose, self.now),
            },
            "nextNextDose": {
                "timestamp": to_timestamp_ms(self.next_next_dose),
                "formatted": format_time(self.next_next_dose),
            },
            "dosesToday": len(self.doses_today),
            "maxDosesToday": self.max_doses_today,
            "overdueMinutes": self.overdue_minutes,
            "isOverdue": self.is_overdue,
        }


@dataclass
class LoggedDose:
    """Result of logging a dose.

    Attributes:
        timestamp: Epoch milliseconds recorded for the dose
        logged_at: Epoch milliseconds when the request was handled
        next_dose: When the following dose is due
    """

    timestamp: int
    logged_at: int
    next_dose: datetime

    def to_dict(self) -> dict:
        return {
            "success": True,
            "loggedAt": self.logged_at,
            "nextDose": {
                "timestamp": to_timestamp_ms(self.next_dose),
                "formatted": format_time(self.next_dose),
            },
        }
