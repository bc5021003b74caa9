"""Clients for collaborators owned by the platform API."""

from alerting_api.services.platform.base import PlatformClient
from alerting_api.services.platform.endpoint_client import PlatformNotificationEndpointService
from alerting_api.services.platform.organization_client import PlatformOrganizationService
from alerting_api.services.platform.task_client import PlatformTaskService
from alerting_api.services.platform.user_client import PlatformUserService

__all__ = [
    "PlatformClient",
    "PlatformNotificationEndpointService",
    "PlatformOrganizationService",
    "PlatformTaskService",
    "PlatformUserService",
]
