"""Database backed label store."""

from sqlalchemy.ext.asyncio import AsyncSession

from alerting_api.exceptions import LabelNotFoundError, MappingNotFoundError
from alerting_api.models.domain.label import Label, LabelMapping
from alerting_api.repositories.label_repository import LabelRepository
from alerting_api.services.interfaces import LabelService


class DatabaseLabelService(LabelService):
    """Labels and label mappings stored in the application database."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session."""
        self.session = session
        self.repo = LabelRepository(session)

    async def find_label_by_id(self, label_id: str) -> Label:
        """Get a label by ID.

        Raises:
            LabelNotFoundError: If the label does not exist
        """
        label = await self.repo.get_by_id(label_id)
        if label is None:
            raise LabelNotFoundError(label_id)
        return Label.model_validate(label)

    async def find_resource_labels(self, resource_id: str, resource_type: str) -> list[Label]:
        """Get the labels mapped to a resource."""
        labels = await self.repo.get_resource_labels(resource_id, resource_type)
        return [Label.model_validate(label) for label in labels]

    async def create_label_mapping(self, mapping: LabelMapping) -> None:
        """Map a label to a resource.

        Mapping an already mapped label is a no-op.

        Raises:
            LabelNotFoundError: If the label does not exist
        """
        if await self.repo.get_by_id(mapping.label_id) is None:
            raise LabelNotFoundError(mapping.label_id)
        existing = await self.repo.get_mapping(
            mapping.label_id, mapping.resource_id, mapping.resource_type
        )
        if existing is None:
            await self.repo.create_mapping(
                mapping.label_id, mapping.resource_id, mapping.resource_type
            )

    async def delete_label_mapping(self, mapping: LabelMapping) -> None:
        """Remove a label mapping.

        Raises:
            MappingNotFoundError: If the label is not mapped to the resource
        """
        deleted = await self.repo.delete_mapping(
            mapping.label_id, mapping.resource_id, mapping.resource_type
        )
        if not deleted:
            raise MappingNotFoundError("label mapping not found", {"labelID": mapping.label_id})
