"""SQLAlchemy declarative base and common mixins."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from alerting_api.models.domain.ids import ID_LENGTH, generate_id

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    type_annotation_map = {dict[str, Any]: JSONType}


class PlatformIDMixin:
    """Primary key holding a 16 character platform identifier."""

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)


class TimestampMixin:
    """Audit timestamps maintained on insert and update."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
