"""Reminder scheduler for the dose tracker."""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger

from dose_tracker.data.storage import DoseLog
from dose_tracker.services.notification_manager import NotificationManager
from dose_tracker.services.schedule import (
    MS_PER_MINUTE,
    OverdueState,
    get_max_doses_for_today,
    get_overdue_state,
)
from dose_tracker.utils import get_local_now, to_timestamp_ms


@dataclass
class ReminderResult:
    """Outcome of one reminder check.

    Attributes:
        message: Human-readable outcome
        overdue_minutes: Minutes overdue, when a dose history exists
        sent: Whether a reminder went out
    """

    message: str
    overdue_minutes: Optional[int] = None
    sent: bool = False

    def to_dict(self) -> dict:
        result = {"message": self.message}
        if self.overdue_minutes is not None:
            result["overdueMinutes"] = self.overdue_minutes
        return result


class ReminderScheduler:
    """Sends a reminder when the next dose is late.

    ``check_and_send_reminder`` is safe to call from overlapping places
    (the background loop and the cron endpoint): a reminder only goes out
    if none was recorded within ``repeat_minutes``, which bounds duplicate
    sends without a lock.
    """

    def __init__(
        self,
        dose_log: DoseLog,
        notification_manager: NotificationManager,
        timezone_offset: str = "+00:00",
        interval_seconds: int = 60,
        min_overdue_minutes: int = 15,
        repeat_minutes: int = 30,
    ):
        """Initialize reminder scheduler.

        Args:
            dose_log: DoseLog instance
            notification_manager: NotificationManager used for delivery
            timezone_offset: Local timezone offset like "+03:00"
            interval_seconds: Period of the background loop
            min_overdue_minutes: Lateness required before reminding
            repeat_minutes: Minimum gap between two reminders
        """
        self.dose_log = dose_log
        self.notification_manager = notification_manager
        self.timezone_offset = timezone_offset
        self.interval = interval_seconds
        self.min_overdue_minutes = min_overdue_minutes
        self.repeat_minutes = repeat_minutes

        self._running = False
        self._task: Optional[asyncio.Task] = None

        logger.info("ReminderScheduler initialized")

    async def start(self):
        """Start the scheduler loop."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._scheduler_loop())
        logger.info("Scheduler started")

    async def stop(self):
        """Stop the scheduler gracefully."""
        if not self._running:
            logger.warning("Scheduler not running")
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Scheduler stopped")

    async def _scheduler_loop(self):
        logger.info(f"Scheduler loop started (interval: {self.interval}s)")

        while self._running:
            try:
                await self.check_and_send_reminder()
            except Exception as e:
                logger.opt(exception=True).error(f"Error in scheduler loop: {e}")

            await asyncio.sleep(self.interval)

    async def check_and_send_reminder(self, now: Optional[datetime] = None) -> ReminderResult:
        """Send a reminder if the dose is late enough and none went out recently.

        Args:
            now: Current local time (defaults to the wall clock)

        Returns:
            ReminderResult describing what happened
        """
        now = now or get_local_now(self.timezone_offset)

        chat_id = await self.dose_log.get_telegram_chat_id()
        if not chat_id:
            logger.debug("No chat ID configured, skipping reminder check")
            return ReminderResult("No chat ID configured")

        last_dose = await self.dose_log.get_last_dose()
        doses_today = await self.dose_log.get_doses_today(now)
        first_dose_ever = await self.dose_log.get_first_dose_ever()
        max_doses = get_max_doses_for_today(doses_today, first_dose_ever, now)

        status = get_overdue_state(last_dose, doses_today, max_doses, now)
        if status.state is OverdueState.NEVER:
            logger.debug("No doses logged yet, nothing to remind about")
            return ReminderResult("No doses logged yet")

        overdue_minutes = status.minutes
        if overdue_minutes < self.min_overdue_minutes:
            return ReminderResult("Not overdue enough", overdue_minutes)

        now_ms = to_timestamp_ms(now)
        last_reminder = await self.dose_log.get_last_reminder_time()
        if last_reminder and now_ms - last_reminder < self.repeat_minutes * MS_PER_MINUTE:
            logger.debug(f"Reminder already sent at {last_reminder}, skipping")
            return ReminderResult("Reminder sent recently")

        sent = await self.notification_manager.send_reminder(chat_id, overdue_minutes)
        if sent:
            await self.dose_log.set_last_reminder_time(now_ms)
            logger.info(f"Sent reminder to chat {chat_id} ({overdue_minutes}m overdue)")
            return ReminderResult("Reminder sent", overdue_minutes, sent=True)

        logger.warning(f"Failed to send reminder to chat {chat_id}")
        return ReminderResult("Failed to send reminder", overdue_minutes)
