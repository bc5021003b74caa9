"""User-resource mapping repository."""

from sqlalchemy import delete, select

from alerting_api.models.orm.user_resource_mapping import UserResourceMappingORM
from alerting_api.repositories.base import BaseRepository


class UserResourceMappingRepository(BaseRepository[UserResourceMappingORM]):
    """Repository for user-resource mappings."""

    model = UserResourceMappingORM

    async def find_mappings(
        self,
        resource_type: str,
        resource_id: str | None = None,
        user_id: str | None = None,
        user_type: str | None = None,
    ) -> list[UserResourceMappingORM]:
        """Find mappings of one resource type with optional filters.

        Returns:
            Mappings ordered by creation time
        """
        query = select(UserResourceMappingORM).where(
            UserResourceMappingORM.resource_type == resource_type
        )
        if resource_id:
            query = query.where(UserResourceMappingORM.resource_id == resource_id)
        if user_id:
            query = query.where(UserResourceMappingORM.user_id == user_id)
        if user_type:
            query = query.where(UserResourceMappingORM.user_type == user_type)
        query = query.order_by(UserResourceMappingORM.created_at, UserResourceMappingORM.user_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_mapping(self, resource_id: str, user_id: str) -> UserResourceMappingORM | None:
        """Get the mapping between a resource and a user."""
        result = await self.session.execute(
            select(UserResourceMappingORM).where(
                UserResourceMappingORM.resource_id == resource_id,
                UserResourceMappingORM.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete_mapping(self, resource_id: str, user_id: str) -> bool:
        """Delete the mapping between a resource and a user.

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            delete(UserResourceMappingORM).where(
                UserResourceMappingORM.resource_id == resource_id,
                UserResourceMappingORM.user_id == user_id,
            )
        )
        await self.session.flush()
        return result.rowcount > 0
