"""Create tracked_entity and code tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from redeemsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tracked_entity",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("source_url_2", sa.Text(), nullable=True),
        sa.Column("source_url_3", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("expired_codes", sa.JSON(), nullable=False),
        sa.Column("roblox_link", sa.Text(), nullable=True),
        sa.Column("community_link", sa.Text(), nullable=True),
        sa.Column("discord_link", sa.Text(), nullable=True),
        sa.Column("twitter_link", sa.Text(), nullable=True),
        sa.Column("youtube_link", sa.Text(), nullable=True),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tracked_entity")),
        sa.UniqueConstraint("slug", name=op.f("uq_tracked_entity_slug")),
    )
    op.create_table(
        "code",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("code", sa.String(255), nullable=False),
        sa.Column("code_key", sa.String(255), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("rewards_text", sa.Text(), nullable=True),
        sa.Column("level_requirement", sa.Integer(), nullable=True),
        sa.Column("is_new", sa.Boolean(), nullable=False),
        sa.Column("first_seen_at", UTCDateTime(), nullable=False),
        sa.Column("last_seen_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["entity_id"],
            ["tracked_entity.id"],
            name=op.f("fk_code_entity_id_tracked_entity"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_code")),
        sa.UniqueConstraint("entity_id", "code_key", name=op.f("uq_code_entity_id_code_key")),
    )
    op.create_index("ix_code_entity_id_status", "code", ["entity_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_code_entity_id_status", table_name="code")
    op.drop_table("code")
    op.drop_table("tracked_entity")
