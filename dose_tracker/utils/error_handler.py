"""Error handling utilities for the dose tracker."""

import functools
from typing import Any, Callable, Optional, TypeVar

from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramNetworkError,
)
from loguru import logger

T = TypeVar('T')


def handle_errors(
    default_return: Any = None,
    notify_user: bool = False,
) -> Callable:
    """Decorator for async functions that handles errors gracefully.

    Catches all exceptions, logs them with full traceback, and returns
    a default value. Optionally replies to the user with a readable message.

    Args:
        default_return: Value to return on error (default: None)
        notify_user: Whether to send error notification to user (default: False)

    Returns:
        Decorated function that handles errors

    Example:
        @router.message(Command("status"))
        @handle_errors(notify_user=True)
        async def handle_status_command(message: Message):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.opt(exception=True).error(f"Error in {func.__name__}: {type(e).__name__}: {e}")

                if notify_user:
                    try:
                        from aiogram.types import Message
                        message = next(
                            (arg for arg in args if isinstance(arg, Message)),
                            None,
                        )
                        if message:
                            await message.answer(format_error_for_user(e))
                    except Exception as notify_error:
                        logger.warning(f"Failed to notify user about error: {notify_error}")

                return default_return

        return wrapper
    return decorator


def format_error_for_user(error: Exception) -> str:
    """Convert technical errors to user-friendly messages.

    Args:
        error: Exception to format

    Returns:
        User-friendly error message
    """
    if isinstance(error, TelegramForbiddenError):
        return (
            "I can't send you messages. "
            "Please check that the bot is not blocked."
        )

    if isinstance(error, TelegramBadRequest):
        return "Something went wrong while processing the request. Please try again."

    if isinstance(error, TelegramNetworkError):
        return "A network error occurred. Please try again in a moment."

    if isinstance(error, TelegramAPIError):
        return "Telegram API error. Please try again."

    # Validation errors carry their own readable text
    if isinstance(error, ValueError):
        return f"⚠️ {error}"

    if isinstance(error, OSError):
        return "Could not access the dose log. Please try again."

    return "An internal error occurred. Please try again."


def log_operation(
    operation_name: str,
    **extra_context,
) -> None:
    """Log an operation with structured context.

    Args:
        operation_name: Name of the operation being performed
        **extra_context: Additional context bound to the log record
    """
    context = {"operation": operation_name}
    context.update(extra_context)

    logger.bind(**context).info(f"Operation: {operation_name}")


__all__ = [
    "handle_errors",
    "format_error_for_user",
    "log_operation",
]
