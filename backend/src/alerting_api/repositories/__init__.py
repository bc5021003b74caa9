"""Repository layer package."""

from alerting_api.repositories.base import BaseRepository
from alerting_api.repositories.label_repository import LabelRepository
from alerting_api.repositories.notification_rule_repository import NotificationRuleRepository
from alerting_api.repositories.user_resource_mapping_repository import (
    UserResourceMappingRepository,
)

__all__ = [
    "BaseRepository",
    "LabelRepository",
    "NotificationRuleRepository",
    "UserResourceMappingRepository",
]
