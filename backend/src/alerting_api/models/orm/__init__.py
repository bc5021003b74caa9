"""SQLAlchemy ORM models package."""

from alerting_api.models.orm.base import Base
from alerting_api.models.orm.label import LabelMappingORM, LabelORM
from alerting_api.models.orm.notification_rule import NotificationRuleORM
from alerting_api.models.orm.user_resource_mapping import UserResourceMappingORM

__all__ = [
    "Base",
    "LabelMappingORM",
    "LabelORM",
    "NotificationRuleORM",
    "UserResourceMappingORM",
]
