"""Utility functions for the dose tracker."""

from .error_handler import (
    format_error_for_user,
    handle_errors,
    log_operation,
)
from .logger import logger, setup_logger
from .timezone import (
    from_timestamp_ms,
    get_day_bounds,
    get_local_now,
    get_timezone,
    parse_timezone_offset,
    start_of_day,
    to_timestamp_ms,
)

__all__ = [
    # Timezone utilities
    "parse_timezone_offset",
    "get_timezone",
    "get_local_now",
    "to_timestamp_ms",
    "from_timestamp_ms",
    "start_of_day",
    "get_day_bounds",
    # Logger utilities
    "setup_logger",
    "logger",
    # Error handling utilities
    "handle_errors",
    "format_error_for_user",
    "log_operation",
]
