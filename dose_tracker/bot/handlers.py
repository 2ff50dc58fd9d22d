"""Telegram bot handlers for the dose tracker."""

from typing import Optional

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from dose_tracker.services.dose_service import DoseService
from dose_tracker.services.notification_manager import (
    HELP_MESSAGE,
    WELCOME_MESSAGE,
    NotificationManager,
)
from dose_tracker.services.schedule import format_time, format_time_ago, format_time_until
from dose_tracker.utils import handle_errors, log_operation, logger

router = Router()

# Initialize services (will be set in bot.py)
dose_service: Optional[DoseService] = None
notification_manager: Optional[NotificationManager] = None


def init_handlers(ds: DoseService, nm: NotificationManager):
    """Initialize handlers with service instances.

    Args:
        ds: DoseService instance
        nm: NotificationManager instance
    """
    global dose_service, notification_manager
    dose_service = ds
    notification_manager = nm
    logger.info("Handlers initialized with service instances")


@router.message(Command("start", ignore_case=True))
@handle_errors(notify_user=True)
async def handle_start_command(message: Message):
    """Handle /start - remember this chat for reminders and say hello."""
    chat_id = str(message.chat.id)
    logger.info(f"Start command from chat {chat_id}")

    await dose_service.register_chat(chat_id)
    await message.answer(WELCOME_MESSAGE)


@router.message(Command("take", ignore_case=True))
@handle_errors(notify_user=True)
async def handle_take_command(message: Message):
    """Handle /take - log a dose now and confirm the next due time."""
    logger.info(f"Take command from chat {message.chat.id}")

    now = dose_service.now()
    logged = await dose_service.log_dose(now=now)

    await message.answer(
        notification_manager.format_dose_confirmation(format_time(logged.next_dose))
    )


@router.message(Command("status", ignore_case=True))
@handle_errors(notify_user=True)
async def handle_status_command(message: Message):
    """Handle /status - report last dose, next dose and today's count."""
    logger.info(f"Status command from chat {message.chat.id}")

    now = dose_service.now()
    status = await dose_service.get_status(now)

    last_dose_ago = (
        format_time_ago(status.last_dose, now) if status.last_dose is not None else "Never"
    )
    await message.answer(
        notification_manager.format_status_message(
            last_dose_ago,
            format_time_until(status.next_dose, now),
            len(status.doses_today),
            status.max_doses_today,
        )
    )
    log_operation("status_sent", chat_id=message.chat.id, overdue_minutes=status.overdue_minutes)


@router.message(Command("help", ignore_case=True))
@handle_errors(notify_user=True)
async def handle_help_command(message: Message):
    """Handle /help."""
    await message.answer(HELP_MESSAGE)
