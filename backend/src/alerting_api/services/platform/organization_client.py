"""Organization directory client."""

from pydantic import ValidationError

from alerting_api.exceptions import (
    NotFoundError,
    OrganizationNotFoundError,
    UpstreamUnavailableError,
)
from alerting_api.models.domain.user_resource_mapping import Organization
from alerting_api.services.interfaces import OrganizationService
from alerting_api.services.platform.base import PlatformClient


class PlatformOrganizationService(PlatformClient, OrganizationService):
    """Organizations, owned by the platform API."""

    service_name = "organization service"

    async def find_organization_by_id(self, org_id: str) -> Organization:
        """Get an organization by ID.

        Raises:
            OrganizationNotFoundError: If the organization does not exist
        """
        try:
            response = await self._request("GET", f"/orgs/{org_id}")
        except NotFoundError as e:
            raise OrganizationNotFoundError(org_id=org_id) from e
        try:
            return Organization.model_validate(self._json(response))
        except ValidationError as e:
            raise UpstreamUnavailableError(self.service_name) from e

    async def find_organization_by_name(self, name: str) -> Organization:
        """Get an organization by its unique name.

        Raises:
            OrganizationNotFoundError: If no organization has this name
        """
        try:
            response = await self._request("GET", "/orgs", params={"org": name})
        except NotFoundError as e:
            raise OrganizationNotFoundError(name=name) from e

        body = self._json(response)
        orgs = body.get("orgs") if isinstance(body, dict) else None
        if not isinstance(orgs, list):
            raise UpstreamUnavailableError(self.service_name, response.status_code)
        for item in orgs:
            try:
                org = Organization.model_validate(item)
            except ValidationError as e:
                raise UpstreamUnavailableError(self.service_name) from e
            if org.name == name:
                return org
        raise OrganizationNotFoundError(name=name)
