"""Security package."""

from alerting_api.security.auth import (
    Principal,
    create_access_token,
    get_current_principal,
)

__all__ = [
    "Principal",
    "create_access_token",
    "get_current_principal",
]
