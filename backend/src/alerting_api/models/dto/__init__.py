"""Data Transfer Objects package."""

from alerting_api.models.dto.notification_rule import (
    NotificationRuleListResponse,
    NotificationRuleResponse,
    QueryResponse,
)

__all__ = [
    "NotificationRuleListResponse",
    "NotificationRuleResponse",
    "QueryResponse",
]
