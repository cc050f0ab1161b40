"""Create users, rules, user_device_tokens and library_items

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial Readlater schema.
How:   PostgreSQL-specific: UUID keys defaulting to gen_random_uuid(),
       JSONB for rule actions and item links, a functional unique index on
       (user_id, lower(name)) for rules.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
        nullable=nullable,
    )


def _owner_column() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("profile_image_url", sa.String(2048), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "rules",
        _id_column(),
        _owner_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("filter", sa.Text(), nullable=False),
        sa.Column(
            "actions",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="List of {type, params} objects",
        ),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rules_user_id", "rules", ["user_id"])
    # Case-insensitive name uniqueness per owner
    op.create_index(
        "uq_rules_user_id_lower_name",
        "rules",
        ["user_id", sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "user_device_tokens",
        _id_column(),
        _owner_column(),
        sa.Column("token", sa.String(512), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_device_tokens_user_id", "user_device_tokens", ["user_id"])
    op.create_index("ix_user_device_tokens_token", "user_device_tokens", ["token"])

    op.create_table(
        "library_items",
        _id_column(),
        _owner_column(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("original_url", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("links", postgresql.JSONB(), nullable=True),
        sa.Column("preview_content", sa.Text(), nullable=True),
        sa.Column("preview_content_type", sa.String(64), nullable=True),
        sa.Column(
            "folder",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'inbox'"),
            comment="inbox, archive or following",
        ),
        sa.Column("subscription", sa.Text(), nullable=True),
        sa.Column("added_to_following_from", sa.String(20), nullable=True),
        _timestamp("published_at", nullable=True),
        _timestamp("saved_at"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "original_url", name="uq_library_items_user_id_original_url"
        ),
    )
    # Library list: one folder of one user, newest first
    op.create_index(
        "idx_library_items_user_folder_saved_at",
        "library_items",
        ["user_id", "folder", sa.text("saved_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_library_items_user_folder_saved_at", table_name="library_items")
    op.drop_table("library_items")
    op.drop_index("ix_user_device_tokens_token", table_name="user_device_tokens")
    op.drop_index("ix_user_device_tokens_user_id", table_name="user_device_tokens")
    op.drop_table("user_device_tokens")
    op.drop_index("uq_rules_user_id_lower_name", table_name="rules")
    op.drop_index("ix_rules_user_id", table_name="rules")
    op.drop_table("rules")
    op.drop_table("users")
