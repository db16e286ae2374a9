"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite

from redeemsync.adapters.sqlalchemy.mappings import (
    LINK_COLUMNS,
    SOURCE_URL_COLUMNS,
    code_table,
    tracked_entity_table,
)
from redeemsync.domain.model import CodeStatus, PersistedCodeRow, TrackedEntity
from redeemsync.domain.normalization import normalize_code_key

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from redeemsync.domain.model import CodeRecord, LinkType

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _entity_from_row(row: Row[Any]) -> TrackedEntity:
    mapping = row._mapping  # noqa: SLF001
    links = {
        link_type: mapping[column]
        for link_type, column in LINK_COLUMNS.items()
        if mapping[column]
    }
    expired = mapping["expired_codes"] or []
    return TrackedEntity(
        id=mapping["id"],
        slug=mapping["slug"],
        name=mapping["name"],
        source_urls=tuple(mapping[column] or "" for column in SOURCE_URL_COLUMNS),
        is_published=mapping["is_published"],
        expired_codes=tuple(str(code) for code in expired),
        links=links,
    )


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_eligible(
        self,
        *,
        offset: int,
        limit: int,
        only: frozenset[str] | None = None,
    ) -> list[TrackedEntity]:
        table = tracked_entity_table
        stmt = select(table).where(table.c.is_published.is_(True))
        if only:
            stmt = stmt.where(or_(table.c.id.in_(only), table.c.slug.in_(only)))
        stmt = stmt.order_by(table.c.name, table.c.id).offset(offset).limit(limit)
        return [_entity_from_row(row) for row in self.session.execute(stmt)]

    def update_fields(
        self,
        entity_id: str,
        *,
        expired_codes: Sequence[str] | None = None,
        links: Mapping[LinkType, str] | None = None,
        updated_at: datetime | None = None,
    ) -> None:
        values: dict[str, object] = {}
        if expired_codes is not None:
            values["expired_codes"] = list(expired_codes)
        for link_type, url in (links or {}).items():
            values[LINK_COLUMNS[link_type]] = url
        if not values:
            return
        if updated_at is not None:
            values["updated_at"] = updated_at
        stmt = (
            update(tracked_entity_table)
            .where(tracked_entity_table.c.id == entity_id)
            .values(**values)
        )
        self.session.execute(stmt)


class SqlAlchemyCodeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def read_codes(self, entity_id: str) -> list[PersistedCodeRow]:
        stmt = (
            select(code_table)
            .where(code_table.c.entity_id == entity_id)
            .order_by(code_table.c.id)
        )
        return [
            PersistedCodeRow(
                entity_id=row.entity_id,
                code=row.code,
                status=CodeStatus(row.status),
                rewards_text=row.rewards_text,
                level_requirement=row.level_requirement,
                is_new=bool(row.is_new),
                first_seen_at=row.first_seen_at,
                last_seen_at=row.last_seen_at,
            )
            for row in self.session.execute(stmt)
        ]

    def upsert_code(self, entity_id: str, record: CodeRecord, *, seen_at: datetime) -> None:
        """Insert or update one code row keyed by ``(entity_id, normalized code)``.

        Runs as a single statement; ``first_seen_at`` is only written on insert.
        """

        code_key = normalize_code_key(record.code)
        if code_key is None:
            raise ValueError(f"Cannot store blank code for entity {entity_id}")

        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise ValueError(f"Code upsert is not supported on the {dialect} dialect")

        stmt = insert(code_table).values(
            entity_id=entity_id,
            code=record.code,
            code_key=code_key,
            status=record.status,
            rewards_text=record.rewards_text,
            level_requirement=record.level_requirement,
            is_new=bool(record.is_new),
            first_seen_at=seen_at,
            last_seen_at=seen_at,
        )
        excluded = stmt.excluded
        stmt = stmt.on_conflict_do_update(
            index_elements=[code_table.c.entity_id, code_table.c.code_key],
            set_={
                "code": excluded.code,
                "status": excluded.status,
                "rewards_text": excluded.rewards_text,
                "level_requirement": excluded.level_requirement,
                "is_new": excluded.is_new,
                "last_seen_at": excluded.last_seen_at,
            },
        )
        self.session.execute(stmt)

    def delete_codes(self, entity_id: str, codes: Sequence[str]) -> int:
        if not codes:
            return 0
        stmt = (
            delete(code_table)
            .where(code_table.c.entity_id == entity_id)
            .where(code_table.c.code.in_(list(codes)))
        )
        result = self.session.execute(stmt)
        return result.rowcount  # pyright: ignore[reportAttributeAccessIssue]
