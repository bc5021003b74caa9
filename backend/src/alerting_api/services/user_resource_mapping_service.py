"""Database backed user-resource mapping store."""

from sqlalchemy.ext.asyncio import AsyncSession

from alerting_api.exceptions import ConflictError, MappingNotFoundError
from alerting_api.models.domain.user_resource_mapping import (
    UserResourceMapping,
    UserResourceMappingFilter,
)
from alerting_api.repositories.user_resource_mapping_repository import UserResourceMappingRepository
from alerting_api.services.interfaces import UserResourceMappingService


class DatabaseUserResourceMappingService(UserResourceMappingService):
    """User roles on resources stored in the application database."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session."""
        self.session = session
        self.repo = UserResourceMappingRepository(session)

    async def find_user_resource_mappings(
        self, mapping_filter: UserResourceMappingFilter
    ) -> list[UserResourceMapping]:
        """List mappings matching a filter."""
        mappings = await self.repo.find_mappings(
            resource_type=mapping_filter.resource_type,
            resource_id=mapping_filter.resource_id,
            user_id=mapping_filter.user_id,
            user_type=mapping_filter.user_type.value if mapping_filter.user_type else None,
        )
        return [UserResourceMapping.model_validate(mapping) for mapping in mappings]

    async def create_user_resource_mapping(self, mapping: UserResourceMapping) -> None:
        """Create a mapping.

        Raises:
            ConflictError: If the user already holds a role on the resource
        """
        if await self.repo.get_mapping(mapping.resource_id, mapping.user_id) is not None:
            raise ConflictError(
                "user already has a role on this resource",
                {"userID": mapping.user_id, "resourceID": mapping.resource_id},
            )
        await self.repo.create(
            resource_id=mapping.resource_id,
            user_id=mapping.user_id,
            resource_type=mapping.resource_type,
            user_type=mapping.user_type.value,
        )

    async def delete_user_resource_mapping(self, resource_id: str, user_id: str) -> None:
        """Delete the mapping between a resource and a user.

        Raises:
            MappingNotFoundError: If the user holds no role on the resource
        """
        if not await self.repo.delete_mapping(resource_id, user_id):
            raise MappingNotFoundError("user resource mapping not found", {"userID": user_id})
