"""SQLAlchemy table metadata for tracked entities and their codes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

from redeemsync.domain.model import CodeStatus, LinkType


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

SOURCE_URL_COLUMNS: Final[tuple[str, ...]] = ("source_url", "source_url_2", "source_url_3")
LINK_COLUMNS: Final[dict[LinkType, str]] = {
    LinkType.ROBLOX: "roblox_link",
    LinkType.COMMUNITY: "community_link",
    LinkType.DISCORD: "discord_link",
    LinkType.TWITTER: "twitter_link",
    LinkType.YOUTUBE: "youtube_link",
}

code_status_type = Enum(
    CodeStatus,
    native_enum=False,
    length=16,
    values_callable=lambda statuses: [status.value for status in statuses],
)

tracked_entity_table = Table(
    "tracked_entity",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("slug", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    *(Column(name, Text, nullable=True) for name in SOURCE_URL_COLUMNS),
    Column("is_published", Boolean, nullable=False, default=True),
    Column("expired_codes", JSON, nullable=False, default=list),
    *(Column(name, Text, nullable=True) for name in LINK_COLUMNS.values()),
    Column("updated_at", UTCDateTime, nullable=True),
)

code_table = Table(
    "code",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "entity_id",
        String(64),
        ForeignKey("tracked_entity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("code", String(255), nullable=False),
    Column("code_key", String(255), nullable=False),
    Column("status", code_status_type, nullable=False),
    Column("rewards_text", Text, nullable=True),
    Column("level_requirement", Integer, nullable=True),
    Column("is_new", Boolean, nullable=False, default=False),
    Column("first_seen_at", UTCDateTime, nullable=False),
    Column("last_seen_at", UTCDateTime, nullable=False),
    UniqueConstraint("entity_id", "code_key"),
    Index("ix_code_entity_id_status", "entity_id", "status"),
)
