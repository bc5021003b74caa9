"""Label and label mapping repository."""

from sqlalchemy import delete, select

from alerting_api.models.orm.label import LabelMappingORM, LabelORM
from alerting_api.repositories.base import BaseRepository


class LabelRepository(BaseRepository[LabelORM]):
    """Repository for labels and their resource mappings."""

    model = LabelORM

    async def get_resource_labels(self, resource_id: str, resource_type: str) -> list[LabelORM]:
        """Get labels mapped to a resource, ordered by name.

        Args:
            resource_id: Resource identifier
            resource_type: Resource type, e.g. ``notificationRules``

        Returns:
            List of labels
        """
        result = await self.session.execute(
            select(LabelORM)
            .join(LabelMappingORM, LabelMappingORM.label_id == LabelORM.id)
            .where(
                LabelMappingORM.resource_id == resource_id,
                LabelMappingORM.resource_type == resource_type,
            )
            .order_by(LabelORM.name, LabelORM.id)
        )
        return list(result.scalars().all())

    async def get_mapping(
        self, label_id: str, resource_id: str, resource_type: str
    ) -> LabelMappingORM | None:
        """Get a label mapping."""
        result = await self.session.execute(
            select(LabelMappingORM).where(
                LabelMappingORM.label_id == label_id,
                LabelMappingORM.resource_id == resource_id,
                LabelMappingORM.resource_type == resource_type,
            )
        )
        return result.scalar_one_or_none()

    async def create_mapping(
        self, label_id: str, resource_id: str, resource_type: str
    ) -> LabelMappingORM:
        """Create a label mapping."""
        mapping = LabelMappingORM(
            label_id=label_id, resource_id=resource_id, resource_type=resource_type
        )
        self.session.add(mapping)
        await self.session.flush()
        return mapping

    async def delete_mapping(self, label_id: str, resource_id: str, resource_type: str) -> bool:
        """Delete a label mapping.

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            delete(LabelMappingORM).where(
                LabelMappingORM.label_id == label_id,
                LabelMappingORM.resource_id == resource_id,
                LabelMappingORM.resource_type == resource_type,
            )
        )
        await self.session.flush()
        return result.rowcount > 0
