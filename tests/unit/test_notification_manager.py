"""Unit tests for message formatting and delivery."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from dose_tracker.services.notification_manager import NotificationManager
from tests.fixtures import CHAT_ID


class TestFormatting:
    """Test cases for message templates."""

    def test_reminder_message(self, notification_manager):
        assert notification_manager.format_reminder_message(20) == (
            "⏰ <b>Medication Reminder</b>\n\n"
            "Your dose was due 20 minutes ago. Don't forget to take it!\n\n"
            "Reply /take when done."
        )

    @pytest.mark.parametrize(
        "minutes,emoji",
        [(15, "⏰"), (30, "⏰"), (31, "🚨"), (120, "🚨")],
    )
    def test_reminder_urgency(self, notification_manager, minutes, emoji):
        text = notification_manager.format_reminder_message(minutes)
        assert text.startswith(emoji)
        assert f"due {minutes} minutes ago" in text

    def test_dose_confirmation(self, notification_manager):
        assert notification_manager.format_dose_confirmation("8:16 PM") == (
            "✅ <b>Dose logged!</b>\n\nNext dose: 8:16 PM"
        )

    def test_status_message(self, notification_manager):
        text = notification_manager.format_status_message("2h 10m ago", "in 1h 20m", 2, 5)
        assert text == (
            "📊 <b>Status</b>\n\n"
            "Last dose: 2h 10m ago\n"
            "Next dose: in 1h 20m\n"
            "Doses today: 2/5"
        )


class TestSendMessage:
    """Test cases for Telegram delivery."""

    @pytest.mark.asyncio
    async def test_send_success(self, notification_manager, mock_bot):
        sent = await notification_manager.send_message(CHAT_ID, "hello")

        assert sent is True
        mock_bot.send_message.assert_awaited_once_with(chat_id=CHAT_ID, text="hello")

    @pytest.mark.asyncio
    async def test_no_bot(self):
        manager = NotificationManager(None)
        assert await manager.send_message(CHAT_ID, "hello") is False

    @pytest.mark.asyncio
    async def test_no_chat(self, notification_manager, mock_bot):
        assert await notification_manager.send_message(None, "hello") is False
        assert await notification_manager.send_message("", "hello") is False
        mock_bot.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_blocked_by_user(self, notification_manager, mock_bot):
        mock_bot.send_message.side_effect = TelegramForbiddenError(
            method=MagicMock(), message="Forbidden: bot was blocked by the user"
        )
        assert await notification_manager.send_message(CHAT_ID, "hello") is False

    @pytest.mark.asyncio
    async def test_bad_request(self, notification_manager, mock_bot):
        mock_bot.send_message.side_effect = TelegramBadRequest(
            method=MagicMock(), message="Bad Request: can't parse entities"
        )
        assert await notification_manager.send_message(CHAT_ID, "<b>") is False

    @pytest.mark.asyncio
    async def test_unexpected_error(self, notification_manager, mock_bot):
        mock_bot.send_message.side_effect = ConnectionError("network down")
        assert await notification_manager.send_message(CHAT_ID, "hello") is False


@pytest.mark.asyncio
async def test_send_reminder_uses_reminder_text(notification_manager, mock_bot):
    """Test that send_reminder delivers the formatted reminder."""
    sent = await notification_manager.send_reminder(CHAT_ID, 46)

    assert sent is True
    text = mock_bot.send_message.call_args.kwargs["text"]
    assert text.startswith("🚨")
    assert "due 46 minutes ago" in text


@pytest.mark.asyncio
async def test_send_status_uses_status_text(notification_manager, mock_bot):
    """Test that send_status delivers the formatted status report."""
    await notification_manager.send_status(CHAT_ID, "Never", "in 0m", 0, 5)

    text = mock_bot.send_message.call_args.kwargs["text"]
    assert text.endswith("Last dose: Never\nNext dose: in 0m\nDoses today: 0/5")


@pytest.mark.asyncio
async def test_send_dose_confirmation_reports_failure():
    """Test that a failed confirmation is reported, not raised."""
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=RuntimeError("boom"))
    manager = NotificationManager(bot)

    assert await manager.send_dose_confirmation(CHAT_ID, "1:30 PM") is False
