"""Configuration settings for the dose tracker."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        """Initialize settings by loading from .env file and environment variables."""
        # Load .env file if it exists
        env_path = Path(__file__).parent.parent.parent / ".env"
        load_dotenv(dotenv_path=env_path)

        # Telegram Bot Configuration
        self.telegram_bot_token: str = self._get_required_env("TELEGRAM_BOT_TOKEN")
        self.bot_mode: str = self._get_env("BOT_MODE", "polling").lower()

        # HTTP API Configuration
        self.api_host: str = self._get_env("API_HOST", "0.0.0.0")
        self.api_port: int = int(self._get_env("API_PORT", "8000"))
        self.cron_secret: str = self._get_env("CRON_SECRET", "")

        # Application Configuration
        self.log_level: str = self._get_env("LOG_LEVEL", "INFO")
        self.logs_dir: Path = Path(self._get_env("LOGS_DIR", "logs"))
        self.log_retention_days: int = int(self._get_env("LOG_RETENTION_DAYS", "30"))
        self.database_path: Path = Path(
            self._get_env("DATABASE_PATH", "data/doses.db")
        )

        # Reminder Configuration
        self.scheduler_enabled: bool = self._get_env(
            "SCHEDULER_ENABLED", "true"
        ).lower() in ("1", "true", "yes")
        self.scheduler_interval_seconds: int = int(
            self._get_env("SCHEDULER_INTERVAL_SECONDS", "60")
        )
        self.reminder_min_overdue_minutes: int = int(
            self._get_env("REMINDER_MIN_OVERDUE_MINUTES", "15")
        )
        self.reminder_repeat_minutes: int = int(
            self._get_env("REMINDER_REPEAT_MINUTES", "30")
        )

        # Timezone Configuration
        self.timezone_offset: str = self._get_env("TIMEZONE_OFFSET", "+00:00")

        if self.bot_mode not in ("polling", "webhook"):
            raise ValueError(
                f"BOT_MODE must be 'polling' or 'webhook', got '{self.bot_mode}'"
            )

        # Ensure database directory exists
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_env(self, key: str, default: Optional[str] = None) -> str:
        """Get environment variable with optional default value.

        Args:
            key: Environment variable name
            default: Default value if variable is not set

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)

    def _get_required_env(self, key: str) -> str:
        """Get required environment variable.

        Args:
            key: Environment variable name

        Returns:
            Environment variable value

        Raises:
            ValueError: If required environment variable is not set
        """
        value = os.getenv(key)
        if value is None:
            raise ValueError(
                f"Required environment variable '{key}' is not set. "
                f"Please set it in .env file or system environment."
            )
        return value

    def __repr__(self) -> str:
        """Return string representation of settings (without sensitive data)."""
        return (
            f"Settings("
            f"telegram_bot_token={'*' * 8}, "
            f"cron_secret={'*' * 8}, "
            f"bot_mode={self.bot_mode}, "
            f"api_host={self.api_host}, "
            f"api_port={self.api_port}, "
            f"log_level={self.log_level}, "
            f"logs_dir={self.logs_dir}, "
            f"log_retention_days={self.log_retention_days}, "
            f"database_path={self.database_path}, "
            f"scheduler_enabled={self.scheduler_enabled}, "
            f"scheduler_interval_seconds={self.scheduler_interval_seconds}, "
            f"reminder_min_overdue_minutes={self.reminder_min_overdue_minutes}, "
            f"reminder_repeat_minutes={self.reminder_repeat_minutes}, "
            f"timezone_offset={self.timezone_offset}"
            f")"
        )
