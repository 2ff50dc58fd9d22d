"""Medication dose tracker: five-a-day dose scheduling, Telegram bot and reminders."""

__version__ = "1.0.0"
