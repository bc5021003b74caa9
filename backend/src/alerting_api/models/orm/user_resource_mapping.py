"""User-resource mapping ORM model."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from alerting_api.models.domain.ids import ID_LENGTH
from alerting_api.models.orm.base import Base, TimestampMixin


class UserResourceMappingORM(Base, TimestampMixin):
    """Role a user holds on a resource."""

    __tablename__ = "user_resource_mappings"

    resource_id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False)
    user_type: Mapped[str] = mapped_column(String(16), nullable=False)

    __table_args__ = (
        Index("idx_user_resource_mappings_user", "user_id", "resource_type"),
    )
