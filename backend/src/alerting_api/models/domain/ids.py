"""Platform identifiers and duration literals."""

import re
import secrets
from datetime import timedelta
from typing import Annotated

from pydantic import AfterValidator

from alerting_api.exceptions import InvalidIDError

ID_LENGTH = 16
_ID_PATTERN = re.compile(r"[0-9a-f]{16}")
_ZERO_ID = "0" * ID_LENGTH

# One or more <int><unit> groups, e.g. "10m", "1h30m", "0s"
_DURATION_PATTERN = re.compile(r"(\d+(ns|us|µs|ms|s|mo|m|h|d|w|y))+")


def is_valid_id(value: str | None) -> bool:
    """Check if a string is a well-formed, non-zero identifier."""
    if not value or not isinstance(value, str):
        return False
    return bool(_ID_PATTERN.fullmatch(value)) and value != _ZERO_ID


def decode_id(value: str | None, field: str = "id") -> str:
    """Decode an identifier from its string form.

    Args:
        value: Raw identifier string (path segment, query or body value)
        field: Name of the field, used in the error message

    Returns:
        The identifier

    Raises:
        InvalidIDError: If the value is missing, malformed or zero
    """
    if not is_valid_id(value):
        raise InvalidIDError(value, field)
    return value  # type: ignore[return-value]


def generate_id() -> str:
    """Generate a new random identifier."""
    while True:
        value = secrets.token_hex(ID_LENGTH // 2)
        if value != _ZERO_ID:
            return value


_DURATION_GROUP = re.compile(r"(\d+)(ns|us|µs|ms|s|mo|m|h|d|w|y)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 7 * 86400,
    "mo": 30 * 86400,
    "y": 365 * 86400,
}


def parse_duration(value: str) -> timedelta:
    """Convert a duration literal into a timedelta.

    Months and years are approximated as 30 and 365 days.
    """
    _validate_duration(value)
    seconds = sum(
        int(amount) * _UNIT_SECONDS[unit] for amount, unit in _DURATION_GROUP.findall(value)
    )
    return timedelta(seconds=seconds)


def _validate_id(value: str) -> str:
    if not is_valid_id(value):
        raise ValueError("invalid identifier: must be 16 lowercase hex characters and non-zero")
    return value


def _validate_duration(value: str) -> str:
    if not _DURATION_PATTERN.fullmatch(value):
        raise ValueError(f"invalid duration {value!r}")
    return value


PlatformID = Annotated[str, AfterValidator(_validate_id)]
Duration = Annotated[str, AfterValidator(_validate_duration)]
