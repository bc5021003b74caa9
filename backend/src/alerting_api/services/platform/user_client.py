"""User directory client."""

from pydantic import ValidationError

from alerting_api.exceptions import NotFoundError, UpstreamUnavailableError, UserNotFoundError
from alerting_api.models.domain.user_resource_mapping import User
from alerting_api.services.interfaces import UserService
from alerting_api.services.platform.base import PlatformClient


class PlatformUserService(PlatformClient, UserService):
    """Users, owned by the platform API."""

    service_name = "user service"

    async def find_user_by_id(self, user_id: str) -> User:
        """Get a user by ID.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        try:
            response = await self._request("GET", f"/users/{user_id}")
        except NotFoundError as e:
            raise UserNotFoundError(user_id) from e
        try:
            return User.model_validate(self._json(response))
        except ValidationError as e:
            raise UpstreamUnavailableError(self.service_name) from e
