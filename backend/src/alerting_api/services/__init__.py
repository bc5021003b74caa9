"""Services package."""

from alerting_api.services.label_association_service import LabelAssociationService
from alerting_api.services.notification_rule_service import NotificationRuleService
from alerting_api.services.rule_response_service import RuleResponseService

__all__ = [
    "LabelAssociationService",
    "NotificationRuleService",
    "RuleResponseService",
]
