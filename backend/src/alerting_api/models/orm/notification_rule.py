"""Notification rule ORM model."""

from typing import Any

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from alerting_api.models.domain.ids import ID_LENGTH
from alerting_api.models.orm.base import Base, PlatformIDMixin, TimestampMixin


class NotificationRuleORM(Base, PlatformIDMixin, TimestampMixin):
    """Notification rule database model.

    Identity, ownership and references live in columns; the variant specific
    definition (schedule, predicates, limits, endpoint options) is stored as
    one JSON document.
    """

    __tablename__ = "notification_rules"

    org_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    task_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    endpoint_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    definition: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)

    __table_args__ = (
        Index("idx_notification_rules_org", "org_id"),
        Index("idx_notification_rules_task", "task_id", unique=True),
    )
