"""Label ORM models."""

from typing import Any

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from alerting_api.models.domain.ids import ID_LENGTH
from alerting_api.models.orm.base import Base, PlatformIDMixin, TimestampMixin


class LabelORM(Base, PlatformIDMixin, TimestampMixin):
    """Label database model."""

    __tablename__ = "labels"

    org_id: Mapped[str | None] = mapped_column(String(ID_LENGTH), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)

    __table_args__ = (UniqueConstraint("org_id", "name", name="uq_labels_org_name"),)


class LabelMappingORM(Base):
    """Junction between a label and the resource it is attached to."""

    __tablename__ = "label_mappings"

    label_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True
    )
    resource_id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    resource_type: Mapped[str] = mapped_column(String(64), primary_key=True)

    __table_args__ = (Index("idx_label_mappings_resource", "resource_type", "resource_id"),)
