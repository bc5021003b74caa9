"""Centralized dependency injection factories for FastAPI.

Every collaborator of the notification rule service is built here per
request, so tests can replace any of them through ``dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from alerting_api.config import Settings, get_settings
from alerting_api.database import get_db
from alerting_api.services.interfaces import (
    LabelService,
    NotificationEndpointService,
    NotificationRuleStore,
    OrganizationService,
    TaskService,
    UserResourceMappingService,
    UserService,
)
from alerting_api.services.label_service import DatabaseLabelService
from alerting_api.services.notification_rule_service import NotificationRuleService
from alerting_api.services.platform import (
    PlatformNotificationEndpointService,
    PlatformOrganizationService,
    PlatformTaskService,
    PlatformUserService,
)
from alerting_api.services.remote_rule_store import (
    RemoteNotificationRuleStore,
    RemoteRuleResponseService,
)
from alerting_api.services.rule_response_service import RuleResponseService
from alerting_api.services.rule_store_service import DatabaseNotificationRuleStore
from alerting_api.services.user_resource_mapping_service import DatabaseUserResourceMappingService

SettingsDep = Annotated[Settings, Depends(get_settings)]


# =============================================================================
# Platform Clients
# =============================================================================


def get_task_service(settings: SettingsDep) -> TaskService:
    """Get task runtime client."""
    return PlatformTaskService(
        settings.platform_api_url, settings.platform_api_token, settings.platform_timeout_seconds
    )


def get_endpoint_service(settings: SettingsDep) -> NotificationEndpointService:
    """Get notification endpoint client."""
    return PlatformNotificationEndpointService(
        settings.platform_api_url, settings.platform_api_token, settings.platform_timeout_seconds
    )


def get_user_service(settings: SettingsDep) -> UserService:
    """Get user directory client."""
    return PlatformUserService(
        settings.platform_api_url, settings.platform_api_token, settings.platform_timeout_seconds
    )


def get_organization_service(settings: SettingsDep) -> OrganizationService:
    """Get organization directory client."""
    return PlatformOrganizationService(
        settings.platform_api_url, settings.platform_api_token, settings.platform_timeout_seconds
    )


# =============================================================================
# Database Services
# =============================================================================


def get_label_service(db: AsyncSession = Depends(get_db)) -> LabelService:
    """Get DatabaseLabelService instance."""
    return DatabaseLabelService(db)


def get_user_resource_mapping_service(
    db: AsyncSession = Depends(get_db),
) -> UserResourceMappingService:
    """Get DatabaseUserResourceMappingService instance."""
    return DatabaseUserResourceMappingService(db)


def get_notification_rule_store(
    settings: SettingsDep,
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service),
    endpoint_service: NotificationEndpointService = Depends(get_endpoint_service),
    organization_service: OrganizationService = Depends(get_organization_service),
    user_resource_mapping_service: UserResourceMappingService = Depends(
        get_user_resource_mapping_service
    ),
) -> NotificationRuleStore:
    """Get the rule store selected by ``rule_store_backend``."""
    if settings.rule_store_backend == "remote":
        return RemoteNotificationRuleStore(
            settings.remote_api_url, settings.remote_api_token, settings.platform_timeout_seconds
        )
    return DatabaseNotificationRuleStore(
        db, task_service, endpoint_service, organization_service, user_resource_mapping_service
    )


# =============================================================================
# Notification Rule Services
# =============================================================================


def get_rule_response_service(
    settings: SettingsDep,
    rule_store: NotificationRuleStore = Depends(get_notification_rule_store),
    task_service: TaskService = Depends(get_task_service),
    label_service: LabelService = Depends(get_label_service),
) -> RuleResponseService:
    """Get the response composer matching the rule store."""
    base_path = f"{settings.api_prefix}/notificationRules"
    if isinstance(rule_store, RemoteNotificationRuleStore):
        return RemoteRuleResponseService(
            rule_store, task_service, label_service, base_path, settings.rule_compose_concurrency
        )
    return RuleResponseService(
        task_service, label_service, base_path, settings.rule_compose_concurrency
    )


def get_notification_rule_service(
    rule_store: NotificationRuleStore = Depends(get_notification_rule_store),
    label_service: LabelService = Depends(get_label_service),
    endpoint_service: NotificationEndpointService = Depends(get_endpoint_service),
    user_resource_mapping_service: UserResourceMappingService = Depends(
        get_user_resource_mapping_service
    ),
    user_service: UserService = Depends(get_user_service),
    composer: RuleResponseService = Depends(get_rule_response_service),
) -> NotificationRuleService:
    """Get NotificationRuleService instance."""
    return NotificationRuleService(
        rule_store,
        label_service,
        endpoint_service,
        user_resource_mapping_service,
        user_service,
        composer,
    )
