"""Shared fixtures for tests."""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Settings are built at import time; give them a harmless environment
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault(
    "DATABASE_PATH", str(Path(tempfile.gettempdir()) / "dose_tracker_tests" / "doses.db")
)

import pytest
import pytest_asyncio

from dose_tracker.bot import handlers
from dose_tracker.data.storage import DoseLog
from dose_tracker.services.dose_service import DoseService
from dose_tracker.services.notification_manager import NotificationManager
from dose_tracker.services.scheduler import ReminderScheduler
from tests.fixtures import TZ_OFFSET, at, ms


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data.

    Yields:
        Path: Path to temporary directory
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest_asyncio.fixture
async def dose_log(temp_data_dir):
    """Create an initialized DoseLog in a temp directory."""
    log = DoseLog(temp_data_dir / "doses.db")
    await log.init()
    return log


@pytest.fixture
def fixed_now():
    """Tuesday 2024-01-02 16:46 local."""
    return at(2, 16, 46)


@pytest.fixture
def dose_service(dose_log, fixed_now, monkeypatch):
    """DoseService whose wall clock is pinned to ``fixed_now``."""
    service = DoseService(dose_log, TZ_OFFSET)
    monkeypatch.setattr(service, "now", lambda: fixed_now)
    return service


@pytest.fixture
def mock_bot():
    """Create mock Bot.

    Returns:
        MagicMock: Mocked Telegram Bot with common methods
    """
    bot = MagicMock()
    bot.send_message = AsyncMock(return_value=MagicMock(message_id=12345))
    return bot


@pytest.fixture
def notification_manager(mock_bot):
    return NotificationManager(mock_bot)


@pytest.fixture
def reminder_scheduler(dose_log, notification_manager):
    return ReminderScheduler(
        dose_log=dose_log,
        notification_manager=notification_manager,
        timezone_offset=TZ_OFFSET,
        interval_seconds=3600,
    )


@pytest.fixture
def bot_handlers(dose_service, notification_manager):
    """Command handlers wired to the test services."""
    handlers.init_handlers(dose_service, notification_manager)
    return handlers


@pytest.fixture
def mock_message():
    """Create mock Message.

    Returns:
        MagicMock: Mocked Telegram Message
    """
    message = MagicMock()
    message.chat.id = 424242
    message.from_user.id = 424242
    message.text = "/status"
    message.answer = AsyncMock()
    return message


@pytest_asyncio.fixture
async def seeded_log(dose_log):
    """Dose log with day one on Jan 1 and two doses on Jan 2.

    At ``fixed_now`` (Jan 2 16:46) the next dose was due at 16:00,
    so it is 46 minutes overdue.
    """
    for moment in (at(1, 10, 0), at(2, 9, 0), at(2, 12, 30)):
        await dose_log.log_dose(ms(moment))
    return dose_log
