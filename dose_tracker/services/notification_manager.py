"""Notification manager for the dose tracker."""

from typing import Optional, Union

from aiogram import Bot
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramNotFound,
)
from loguru import logger

from dose_tracker.utils import log_operation

# Reminders past this many minutes overdue get the siren emoji
URGENT_OVERDUE_MINUTES = 30

WELCOME_MESSAGE = (
    "👋 <b>Welcome to Medication Tracker!</b>\n\n"
    "I'll remind you when it's time to take your medication.\n\n"
    "<b>Commands:</b>\n"
    "/take - Log a dose\n"
    "/status - Check your schedule\n"
    "/help - Show this message"
)

HELP_MESSAGE = (
    "💊 <b>Medication Tracker Help</b>\n\n"
    "/take - Log that you've taken a dose\n"
    "/status - See last dose and next due time\n"
    "/help - Show this message\n\n"
    "I'll automatically remind you if you're late!"
)


class NotificationManager:
    """Formats and delivers Telegram messages.

    Sending never raises: every Telegram failure is logged and reported
    as ``False`` so request handlers can carry on.
    """

    def __init__(self, bot: Optional[Bot]):
        """Initialize notification manager.

        Args:
            bot: aiogram Bot used for delivery, or None to disable sending
        """
        self.bot = bot
        logger.debug("NotificationManager initialized")

    def format_reminder_message(self, overdue_minutes: int) -> str:
        emoji = "🚨" if overdue_minutes > URGENT_OVERDUE_MINUTES else "⏰"
        return (
            f"{emoji} <b>Medication Reminder</b>\n\n"
            f"Your dose was due {overdue_minutes} minutes ago. "
            f"Don't forget to take it!\n\n"
            f"Reply /take when done."
        )

    def format_dose_confirmation(self, next_dose_time: str) -> str:
        return f"✅ <b>Dose logged!</b>\n\nNext dose: {next_dose_time}"

    def format_status_message(
        self,
        last_dose_ago: str,
        next_dose_in: str,
        doses_today: int,
        max_doses_today: int,
    ) -> str:
        """Format the /status report.

        Format:
            📊 Status

            Last dose: 2h 10m ago
            Next dose: in 1h 20m
            Doses today: 2/5
        """
        return (
            f"📊 <b>Status</b>\n\n"
            f"Last dose: {last_dose_ago}\n"
            f"Next dose: {next_dose_in}\n"
            f"Doses today: {doses_today}/{max_doses_today}"
        )

    async def send_message(self, chat_id: Union[int, str, None], text: str) -> bool:
        """Send an HTML message.

        Args:
            chat_id: Telegram chat ID
            text: Message text

        Returns:
            True if Telegram accepted the message, False otherwise
        """
        if self.bot is None or not chat_id:
            logger.warning("Cannot send message: bot or chat ID not configured")
            return False

        try:
            message = await self.bot.send_message(chat_id=chat_id, text=text)
            logger.debug(f"Sent message {message.message_id} to chat {chat_id}")
            return True
        except TelegramForbiddenError as e:
            logger.warning(f"Chat {chat_id} blocked the bot: {e}")
        except TelegramNotFound as e:
            logger.warning(f"Chat {chat_id} not found: {e}")
        except TelegramBadRequest as e:
            logger.opt(exception=True).error(
                f"Bad request when sending message to chat {chat_id}: {e}"
            )
        except TelegramAPIError as e:
            logger.opt(exception=True).error(
                f"Telegram API error for chat {chat_id}: {type(e).__name__}: {e}"
            )
        except Exception as e:
            logger.opt(exception=True).error(
                f"Error sending message to chat {chat_id}: {type(e).__name__}: {e}"
            )
        return False

    async def send_reminder(self, chat_id: Union[int, str], overdue_minutes: int) -> bool:
        sent = await self.send_message(chat_id, self.format_reminder_message(overdue_minutes))
        if sent:
            log_operation("reminder_sent", chat_id=chat_id, overdue_minutes=overdue_minutes)
        return sent

    async def send_dose_confirmation(self, chat_id: Union[int, str], next_dose_time: str) -> bool:
        return await self.send_message(chat_id, self.format_dose_confirmation(next_dose_time))

    async def send_status(
        self,
        chat_id: Union[int, str],
        last_dose_ago: str,
        next_dose_in: str,
        doses_today: int,
        max_doses_today: int,
    ) -> bool:
        text = self.format_status_message(
            last_dose_ago, next_dose_in, doses_today, max_doses_today
        )
        return await self.send_message(chat_id, text)
