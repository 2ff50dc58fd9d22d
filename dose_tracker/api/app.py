"""FastAPI application for the dose tracker."""

from typing import Optional

from aiogram import Bot, Dispatcher
from fastapi import FastAPI

from dose_tracker.api.routes import router
from dose_tracker.services.dose_service import DoseService
from dose_tracker.services.notification_manager import NotificationManager
from dose_tracker.services.scheduler import ReminderScheduler


def create_app(
    dose_service: DoseService,
    notification_manager: NotificationManager,
    reminder_scheduler: ReminderScheduler,
    cron_secret: str = "",
    bot: Optional[Bot] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """Build the HTTP app around already-initialized services.

    Args:
        dose_service: DoseService for reading and logging doses
        notification_manager: NotificationManager for dose confirmations
        reminder_scheduler: ReminderScheduler run by the cron endpoint
        cron_secret: Bearer secret for /api/cron/remind (empty disables it)
        bot: Bot that webhook updates are dispatched to
        dispatcher: Dispatcher that handles webhook updates

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Dose Tracker",
        description="Medication dose log, schedule and reminders",
        version="1.0.0",
    )

    app.state.dose_service = dose_service
    app.state.notification_manager = notification_manager
    app.state.reminder_scheduler = reminder_scheduler
    app.state.cron_secret = cron_secret
    app.state.bot = bot
    app.state.dispatcher = dispatcher

    app.include_router(router)
    return app
