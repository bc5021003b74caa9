"""Secure logging utilities to prevent information disclosure."""

import logging
import re
from functools import lru_cache

from alerting_api.config import get_settings

MAX_MESSAGE_LENGTH = 200

_SCRUB_PATTERNS = [
    # Bearer credentials echoed by HTTP libraries
    (re.compile(r"Bearer\s+[^\s'\"]+", re.IGNORECASE), "Bearer [TOKEN]"),
    # Connection strings and remote API URLs
    (re.compile(r"(postgresql|postgres|sqlite|http|https)(\+\w+)?://[^\s'\"]+"), "[URL]"),
    # File paths (Unix and Windows)
    (re.compile(r"['\"]?(/[a-zA-Z0-9_./\-]+|[A-Z]:\\[^\s'\"]+)['\"]?"), "[PATH]"),
    (re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+"), "[EMAIL]"),
    # Secrets and tokens (long alphanumeric strings); platform IDs are 16 characters
    (re.compile(r"[a-zA-Z0-9_\-]{32,}"), "[TOKEN]"),
]


@lru_cache(maxsize=1)
def is_debug_mode() -> bool:
    """Check if application is running in debug mode."""
    return get_settings().debug


def sanitize_exception_message(error: BaseException) -> str:
    """Sanitize an exception message for logs and per-item failure reasons.

    Removes tokens, URLs, file paths and email addresses, then truncates.

    Args:
        error: The exception to sanitize

    Returns:
        Sanitized error message
    """
    message = str(error) or type(error).__name__
    for pattern, replacement in _SCRUB_PATTERNS:
        message = pattern.sub(replacement, message)
    if len(message) > MAX_MESSAGE_LENGTH:
        message = message[: MAX_MESSAGE_LENGTH - 3] + "..."
    return message


def _log(logger: logging.Logger, level: int, message: str, error: BaseException | None) -> None:
    if error is None:
        logger.log(level, message)
    elif is_debug_mode():
        logger.log(level, f"{message}: {error}", exc_info=level >= logging.ERROR)
    else:
        logger.log(level, f"{message}: {sanitize_exception_message(error)}")


def log_error(logger: logging.Logger, message: str, error: BaseException | None = None) -> None:
    """Log an error, with full exception details only in debug mode."""
    _log(logger, logging.ERROR, message, error)


def log_warning(logger: logging.Logger, message: str, error: BaseException | None = None) -> None:
    """Log a warning, with full exception details only in debug mode."""
    _log(logger, logging.WARNING, message, error)
