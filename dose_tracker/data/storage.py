"""Dose log storage for the dose tracker."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import aiosqlite
from loguru import logger

from dose_tracker.utils.timezone import get_day_bounds

TELEGRAM_CHAT_ID_KEY = "telegram_chat_id"
LAST_REMINDER_KEY = "last_reminder_sent"


class DoseLog:
    """Append-only log of dose timestamps backed by SQLite.

    Doses are keyed by their own epoch-millisecond value, so logging the
    same instant twice stores it once. A small key/value table holds the
    chat id and the time the last reminder went out.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)

    async def init(self):
        """Initialize database with schema."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA journal_mode=WAL")

            await db.execute("""
                CREATE TABLE IF NOT EXISTS doses (
                    taken_at INTEGER PRIMARY KEY
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            await db.commit()
        logger.debug(f"Dose log initialized at {self.db_path}")

    async def log_dose(self, timestamp: int) -> bool:
        """Append a dose.

        Args:
            timestamp: Epoch milliseconds when the dose was taken

        Returns:
            True if stored, False if that exact instant was already logged
        """
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT OR IGNORE INTO doses (taken_at) VALUES (?)",
                (timestamp,)
            )
            await db.commit()
            inserted = cursor.rowcount > 0

        if not inserted:
            logger.debug(f"Dose {timestamp} already logged")
        return inserted

    async def get_last_dose(self) -> Optional[int]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT MAX(taken_at) FROM doses")
            row = await cursor.fetchone()
            return row[0] if row else None

    async def get_first_dose_ever(self) -> Optional[int]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT MIN(taken_at) FROM doses")
            row = await cursor.fetchone()
            return row[0] if row else None

    async def get_doses_between(self, start: int, end: int) -> list[int]:
        """Get doses in the inclusive range [start, end], oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT taken_at FROM doses "
                "WHERE taken_at BETWEEN ? AND ? ORDER BY taken_at",
                (start, end)
            )
            rows = await cursor.fetchall()
            return [row[0] for row in rows]

    async def get_doses_today(self, now: datetime) -> list[int]:
        """Get doses from the local calendar day containing ``now``."""
        start, end = get_day_bounds(now)
        return await self.get_doses_between(start, end)

    async def _get_setting(self, key: str) -> Optional[str]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT value FROM settings WHERE key = ?",
                (key,)
            )
            row = await cursor.fetchone()
            return row[0] if row else None

    async def _set_setting(self, key: str, value: str):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value)
            )
            await db.commit()

    async def get_last_reminder_time(self) -> Optional[int]:
        value = await self._get_setting(LAST_REMINDER_KEY)
        return int(value) if value is not None else None

    async def set_last_reminder_time(self, timestamp: int):
        await self._set_setting(LAST_REMINDER_KEY, str(timestamp))

    async def save_telegram_chat_id(self, chat_id: str):
        await self._set_setting(TELEGRAM_CHAT_ID_KEY, str(chat_id))
        logger.info(f"Saved Telegram chat ID {chat_id}")

    async def get_telegram_chat_id(self) -> Optional[str]:
        return await self._get_setting(TELEGRAM_CHAT_ID_KEY)
