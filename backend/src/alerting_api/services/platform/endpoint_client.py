"""Notification endpoint client."""

from pydantic import ValidationError

from alerting_api.exceptions import (
    NotFoundError,
    NotificationEndpointNotFoundError,
    UpstreamUnavailableError,
)
from alerting_api.models.domain.endpoint import NotificationEndpoint
from alerting_api.services.interfaces import NotificationEndpointService
from alerting_api.services.platform.base import PlatformClient


class PlatformNotificationEndpointService(PlatformClient, NotificationEndpointService):
    """Notification endpoints, owned by the platform API."""

    service_name = "notification endpoint service"

    async def find_notification_endpoint_by_id(self, endpoint_id: str) -> NotificationEndpoint:
        """Get an endpoint by ID.

        Raises:
            NotificationEndpointNotFoundError: If the endpoint does not exist
        """
        try:
            response = await self._request("GET", f"/notificationEndpoints/{endpoint_id}")
        except NotFoundError as e:
            raise NotificationEndpointNotFoundError(endpoint_id) from e
        try:
            return NotificationEndpoint.model_validate(self._json(response))
        except ValidationError as e:
            raise UpstreamUnavailableError(self.service_name) from e
