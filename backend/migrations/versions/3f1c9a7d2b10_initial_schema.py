"""initial_schema

Create accounts and properties tables.

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

account_role = sa.Enum("USER", "AGENT", "ADMIN", name="accountrole")
property_type = sa.Enum("SALE", "RENT", name="propertytype")
property_status = sa.Enum("AVAILABLE", "SOLD", "RENTED", "PENDING", name="propertystatus")
furnishing = sa.Enum("UNFURNISHED", "SEMI_FURNISHED", "FULLY_FURNISHED", name="furnishing")


def _moderation_columns() -> list[sa.Column]:
    return [
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rejection_reason", sa.String(1000), nullable=False, server_default=""),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.VARCHAR(21), nullable=True),
    ]


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("contact", sa.String(20), nullable=False),
        sa.Column("role", account_role, nullable=False),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("city", sa.String(100), nullable=False, server_default=""),
        sa.Column("state", sa.String(100), nullable=False, server_default=""),
        sa.Column("country", sa.String(100), nullable=False, server_default=""),
        sa.Column("pincode", sa.String(20), nullable=False, server_default=""),
        sa.Column("agency_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("license_number", sa.String(100), nullable=False, server_default=""),
        sa.Column("experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("specialization", sa.JSON(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        *_moderation_columns(),
        *_timestamp_columns(),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
    op.create_index("ix_accounts_role", "accounts", ["role"])
    op.create_index("ix_accounts_is_approved", "accounts", ["is_approved"])

    op.create_table(
        "properties",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("property_type", property_type, nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("pincode", sa.String(10), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("area", sa.Float(), nullable=False),
        sa.Column("furnishing", furnishing, nullable=False),
        sa.Column("status", property_status, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "agent_id",
            sa.VARCHAR(21),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_moderation_columns(),
        *_timestamp_columns(),
    )
    op.create_index("ix_properties_agent_id", "properties", ["agent_id"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_category", "properties", ["category"])
    op.create_index("ix_properties_property_type", "properties", ["property_type"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_is_approved", "properties", ["is_approved"])


def downgrade() -> None:
    op.drop_table("properties")
    op.drop_table("accounts")
    for enum in (furnishing, property_status, property_type, account_role):
        enum.drop(op.get_bind(), checkfirst=True)
