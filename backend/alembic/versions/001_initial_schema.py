"""Initial schema

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # Create notification_rules table
    op.create_table(
        "notification_rules",
        sa.Column("id", sa.String(16), nullable=False),
        sa.Column("org_id", sa.String(16), nullable=False),
        sa.Column("owner_id", sa.String(16), nullable=False),
        sa.Column("task_id", sa.String(16), nullable=False),
        sa.Column("endpoint_id", sa.String(16), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("definition", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notification_rules_org", "notification_rules", ["org_id"])
    op.create_index("idx_notification_rules_task", "notification_rules", ["task_id"], unique=True)

    # Create labels table
    op.create_table(
        "labels",
        sa.Column("id", sa.String(16), nullable=False),
        sa.Column("org_id", sa.String(16), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("properties", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "name", name="uq_labels_org_name"),
    )

    # Create label_mappings table
    op.create_table(
        "label_mappings",
        sa.Column("label_id", sa.String(16), nullable=False),
        sa.Column("resource_id", sa.String(16), nullable=False),
        sa.Column("resource_type", sa.String(64), nullable=False),
        sa.ForeignKeyConstraint(["label_id"], ["labels.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("label_id", "resource_id", "resource_type"),
    )
    op.create_index(
        "idx_label_mappings_resource", "label_mappings", ["resource_type", "resource_id"]
    )

    # Create user_resource_mappings table
    op.create_table(
        "user_resource_mappings",
        sa.Column("resource_id", sa.String(16), nullable=False),
        sa.Column("user_id", sa.String(16), nullable=False),
        sa.Column("resource_type", sa.String(64), nullable=False),
        sa.Column("user_type", sa.String(16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("resource_id", "user_id"),
    )
    op.create_index(
        "idx_user_resource_mappings_user", "user_resource_mappings", ["user_id", "resource_type"]
    )


def downgrade() -> None:
    op.drop_index("idx_user_resource_mappings_user", table_name="user_resource_mappings")
    op.drop_table("user_resource_mappings")
    op.drop_index("idx_label_mappings_resource", table_name="label_mappings")
    op.drop_table("label_mappings")
    op.drop_table("labels")
    op.drop_index("idx_notification_rules_task", table_name="notification_rules")
    op.drop_index("idx_notification_rules_org", table_name="notification_rules")
    op.drop_table("notification_rules")
