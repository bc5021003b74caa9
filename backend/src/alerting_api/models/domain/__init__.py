"""Domain models package."""

from alerting_api.models.domain.endpoint import EndpointType, NotificationEndpoint
from alerting_api.models.domain.label import Label, LabelMapping
from alerting_api.models.domain.notification_rule import (
    HTTPNotificationRule,
    NotificationRule,
    NotificationRuleBase,
    PagerDutyNotificationRule,
    SlackNotificationRule,
)
from alerting_api.models.domain.task import TaskRunSnapshot, TaskStatus

__all__ = [
    "EndpointType",
    "HTTPNotificationRule",
    "Label",
    "LabelMapping",
    "NotificationEndpoint",
    "NotificationRule",
    "NotificationRuleBase",
    "PagerDutyNotificationRule",
    "SlackNotificationRule",
    "TaskRunSnapshot",
    "TaskStatus",
]
