"""Telegram bot initialization and setup."""

from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from loguru import logger

from dose_tracker.bot import handlers
from dose_tracker.config import settings
from dose_tracker.services.dose_service import DoseService
from dose_tracker.services.notification_manager import NotificationManager

# Global bot instance
bot: Optional[Bot] = None
dp: Optional[Dispatcher] = None
notification_manager: Optional[NotificationManager] = None


def init_bot(dose_service: DoseService) -> tuple[Bot, Dispatcher]:
    """Initialize bot and dispatcher and wire the command handlers.

    Args:
        dose_service: DoseService the handlers read and write through

    Returns:
        Tuple of (Bot, Dispatcher) instances
    """
    global bot, dp, notification_manager

    logger.info("Initializing bot...")

    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = Dispatcher()

    notification_manager = NotificationManager(bot)
    handlers.init_handlers(dose_service, notification_manager)

    dp.include_router(handlers.router)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    logger.info("Bot initialized successfully")

    return bot, dp


async def on_startup():
    """Handler called when polling starts."""
    logger.info("Bot started")
    logger.info(f"Timezone offset: {settings.timezone_offset}")

    if bot:
        bot_info = await bot.get_me()
        logger.info(f"Bot username: @{bot_info.username}")
        logger.info(f"Bot ID: {bot_info.id}")


async def on_shutdown():
    """Handler called when polling stops."""
    logger.info("Bot shutting down...")


def get_notification_manager() -> NotificationManager:
    """Get notification manager instance.

    Raises:
        RuntimeError: If bot not initialized
    """
    if notification_manager is None:
        raise RuntimeError("Bot not initialized. Call init_bot() first.")
    return notification_manager
