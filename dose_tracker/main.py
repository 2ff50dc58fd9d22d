"""Main entry point for the dose tracker."""

import asyncio
import signal
import sys

import uvicorn

from dose_tracker.api import create_app
from dose_tracker.bot.bot import get_notification_manager, init_bot
from dose_tracker.config import settings
from dose_tracker.data.storage import DoseLog
from dose_tracker.services.dose_service import DoseService
from dose_tracker.services.scheduler import ReminderScheduler
from dose_tracker.utils import logger, setup_logger


async def main():
    """Main application entry point."""
    setup_logger(
        console_level=settings.log_level,
        logs_dir=settings.logs_dir,
        retention_days=settings.log_retention_days,
    )

    logger.info("=" * 60)
    logger.info("Starting Dose Tracker")
    logger.info("=" * 60)

    logger.info(f"Database: {settings.database_path}")
    logger.info(f"Timezone offset: {settings.timezone_offset}")
    logger.info(f"Bot mode: {settings.bot_mode}")
    logger.info(f"Scheduler enabled: {settings.scheduler_enabled}")

    # Initialize storage and services
    try:
        dose_log = DoseLog(settings.database_path)
        await dose_log.init()
        dose_service = DoseService(dose_log, settings.timezone_offset)
        bot, dp = init_bot(dose_service)
        notification_manager = get_notification_manager()
        logger.info("Bot and services initialized")
    except Exception as e:
        logger.opt(exception=True).error(f"Failed to initialize services: {e}")
        sys.exit(1)

    scheduler = ReminderScheduler(
        dose_log=dose_log,
        notification_manager=notification_manager,
        timezone_offset=settings.timezone_offset,
        interval_seconds=settings.scheduler_interval_seconds,
        min_overdue_minutes=settings.reminder_min_overdue_minutes,
        repeat_minutes=settings.reminder_repeat_minutes,
    )

    app = create_app(
        dose_service=dose_service,
        notification_manager=notification_manager,
        reminder_scheduler=scheduler,
        cron_secret=settings.cron_secret,
        bot=bot,
        dispatcher=dp,
    )
    server = uvicorn.Server(
        uvicorn.Config(app, host=settings.api_host, port=settings.api_port, log_level="warning")
    )
    # Signals are handled below
    server.install_signal_handlers = lambda: None

    shutdown_event = asyncio.Event()

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, initiating graceful shutdown...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if settings.scheduler_enabled:
        await scheduler.start()

    server_task = asyncio.create_task(server.serve())
    logger.info(f"HTTP API listening on {settings.api_host}:{settings.api_port}")

    polling_task = None
    if settings.bot_mode == "polling":
        logger.info("Starting bot polling...")
        polling_task = asyncio.create_task(
            dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types(), handle_signals=False)
        )

    shutdown_task = asyncio.create_task(shutdown_event.wait())
    try:
        # The server exits on its own if it fails to bind or catches the signal first
        await asyncio.wait({shutdown_task, server_task}, return_when=asyncio.FIRST_COMPLETED)
        logger.info("Shutdown signal received, stopping services...")
    finally:
        if settings.scheduler_enabled:
            await scheduler.stop()

        if polling_task:
            polling_task.cancel()
            try:
                await polling_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.opt(exception=True).error(f"Bot polling failed: {e}")
            logger.info("Bot polling stopped")

        shutdown_task.cancel()
        server.should_exit = True
        try:
            await server_task
        except (Exception, SystemExit) as e:
            logger.opt(exception=True).error(f"HTTP API failed: {e!r}")
        logger.info("HTTP API stopped")

        await bot.session.close()
        logger.info("Bot session closed")

    logger.info("=" * 60)
    logger.info("Dose Tracker stopped")
    logger.info("=" * 60)


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received KeyboardInterrupt, exiting...")
    except Exception as e:
        logger.opt(exception=True).error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
