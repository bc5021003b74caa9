"""API routers package."""

from alerting_api.routers import notification_rules

__all__ = [
    "notification_rules",
]
