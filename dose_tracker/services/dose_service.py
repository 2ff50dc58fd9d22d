"""Dose service: glue between the dose log and the scheduling engine."""

from datetime import datetime
from typing import Optional

from loguru import logger

from dose_tracker.data.models import DoseStatus, LoggedDose
from dose_tracker.data.storage import DoseLog
from dose_tracker.services.schedule import (
    MS_PER_HOUR,
    MS_PER_MINUTE,
    calculate_next_two_doses,
    get_max_doses_for_today,
    get_overdue_minutes,
)
from dose_tracker.utils import get_local_now, log_operation, to_timestamp_ms

MAX_BACKDATE_MS = 4 * MS_PER_HOUR
# Allowed clock drift for doses stamped by the client
FUTURE_TOLERANCE_MS = MS_PER_MINUTE


class DoseValidationError(ValueError):
    """Raised when a dose timestamp falls outside the accepted window."""
    pass


class DoseService:
    """Reads the dose log, runs the scheduling engine, and logs new doses.

    All "today" views use the configured timezone offset. Methods accept
    an explicit ``now`` so callers (and tests) control the clock.
    """

    def __init__(self, dose_log: DoseLog, timezone_offset: str = "+00:00"):
        """Initialize dose service.

        Args:
            dose_log: DoseLog instance for persistence
            timezone_offset: Local timezone offset like "+03:00"
        """
        self.dose_log = dose_log
        self.timezone_offset = timezone_offset
        logger.debug(f"DoseService initialized (timezone {timezone_offset})")

    def now(self) -> datetime:
        return get_local_now(self.timezone_offset)

    async def get_status(self, now: Optional[datetime] = None) -> DoseStatus:
        """Compute the current schedule snapshot.

        Args:
            now: Current local time (defaults to the wall clock)

        Returns:
            DoseStatus with last/next doses, quota and overdue minutes
        """
        now = now or self.now()

        last_dose = await self.dose_log.get_last_dose()
        doses_today = await self.dose_log.get_doses_today(now)
        first_dose_ever = await self.dose_log.get_first_dose_ever()

        max_doses = get_max_doses_for_today(doses_today, first_dose_ever, now)
        upcoming = calculate_next_two_doses(last_dose, doses_today, max_doses, now)
        overdue = get_overdue_minutes(last_dose, doses_today, max_doses, now)

        return DoseStatus(
            now=now,
            last_dose=last_dose,
            next_dose=upcoming.next,
            next_next_dose=upcoming.next_next,
            doses_today=doses_today,
            max_doses_today=max_doses,
            overdue_minutes=overdue,
        )

    def validate_dose_timestamp(self, timestamp: int, now: datetime) -> None:
        """Check that a dose lies within [now - 4h, now + 1min].

        Raises:
            DoseValidationError: If the timestamp is too far in the future or past
        """
        now_ms = to_timestamp_ms(now)
        if timestamp > now_ms + FUTURE_TOLERANCE_MS:
            raise DoseValidationError("Cannot log future doses")
        if timestamp < now_ms - MAX_BACKDATE_MS:
            raise DoseValidationError("Cannot backdate more than 4 hours")

    async def log_dose(
        self,
        timestamp: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> LoggedDose:
        """Validate and store a dose, then compute the next one.

        The follow-up schedule is computed from a fresh read of the log so
        it always includes the dose just written.

        Args:
            timestamp: Epoch milliseconds of the dose (defaults to now)
            now: Current local time (defaults to the wall clock)

        Returns:
            LoggedDose with the stored timestamp and the next due time

        Raises:
            DoseValidationError: If the timestamp is out of range
        """
        now = now or self.now()
        now_ms = to_timestamp_ms(now)
        if timestamp is None:
            timestamp = now_ms

        self.validate_dose_timestamp(timestamp, now)
        await self.dose_log.log_dose(timestamp)

        last_dose = await self.dose_log.get_last_dose()
        doses_today = await self.dose_log.get_doses_today(now)
        first_dose_ever = await self.dose_log.get_first_dose_ever()

        max_doses = get_max_doses_for_today(doses_today, first_dose_ever, now)
        upcoming = calculate_next_two_doses(last_dose, doses_today, max_doses, now)

        log_operation(
            "dose_logged",
            timestamp=timestamp,
            backdated_ms=now_ms - timestamp,
            doses_today=len(doses_today),
            max_doses_today=max_doses,
        )
        logger.info(
            f"Logged dose at {timestamp} ({len(doses_today)}/{max_doses} today), "
            f"next due {upcoming.next.isoformat()}"
        )

        return LoggedDose(timestamp=timestamp, logged_at=now_ms, next_dose=upcoming.next)

    async def register_chat(self, chat_id: str) -> None:
        """Remember the chat that receives reminders."""
        await self.dose_log.save_telegram_chat_id(chat_id)
        log_operation("chat_registered", chat_id=chat_id)
