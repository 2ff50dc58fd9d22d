"""Logging configuration for the dose tracker."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS ZZ} | {level: <8} | {name}:{function}:{line} | {message}"


def _is_operation(record) -> bool:
    """Records emitted by log_operation carry an ``operation`` key."""
    return "operation" in record["extra"]


def setup_logger(
    console_level: str = "INFO",
    logs_dir: Optional[Path] = None,
    retention_days: int = 30,
) -> None:
    """Configure console and file logging.

    Three sinks are installed:
    - stderr, colored, at ``console_level``
    - ``dose_tracker_<date>.log`` with everything from DEBUG up, rotated daily
    - ``operations_<date>.jsonl``, one JSON record per dose, reminder and
      chat event, which is the audit trail of what the tracker did

    Args:
        console_level: Log level for console output
        logs_dir: Directory for log files (default: project_root/logs)
        retention_days: Days to keep rotated files before deleting them
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=console_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if logs_dir is None:
        logs_dir = Path(__file__).parent.parent.parent / "logs"
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    retention = f"{retention_days} days"

    logger.add(
        logs_dir / "dose_tracker_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="00:00",
        retention=retention,
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=True,
    )

    logger.add(
        logs_dir / "operations_{time:YYYY-MM-DD}.jsonl",
        level="INFO",
        filter=_is_operation,
        serialize=True,
        rotation="00:00",
        retention=retention,
    )

    logger.info(f"Logging to {logs_dir} (console {console_level}, keep {retention})")


__all__ = ["setup_logger", "logger"]
