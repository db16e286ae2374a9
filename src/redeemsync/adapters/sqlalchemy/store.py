"""Transactional ``CodeStore`` gateway over the SQLAlchemy unit of work."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from redeemsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence

    from redeemsync.domain.model import (
        CodeRecord,
        LinkType,
        PersistedCodeRow,
        TrackedEntity,
    )
    from redeemsync.domain.ports import CodeRepositories, CodeStore, CodeUnitOfWork

log = getLogger(__name__)


class PersistenceError(RuntimeError):
    """A gateway call failed in the database layer."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyCodeStore:
    """Each method runs in its own unit of work and commits before returning."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], CodeUnitOfWork] = SqlAlchemyUnitOfWork,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    @contextmanager
    def _transaction(self, action: str) -> Iterator[CodeRepositories]:
        try:
            with self._unit_of_work_factory() as uow:
                yield uow.repositories
                uow.commit()
        except SQLAlchemyError as exc:
            log.debug("%s failed", action, exc_info=True)
            raise PersistenceError(f"{action} failed: {exc}") from exc

    def list_eligible(
        self,
        *,
        offset: int,
        limit: int,
        only: frozenset[str] | None = None,
    ) -> list[TrackedEntity]:
        with self._transaction("Listing eligible entities") as repositories:
            return repositories.entities.list_eligible(offset=offset, limit=limit, only=only)

    def read_codes(self, entity_id: str) -> list[PersistedCodeRow]:
        with self._transaction(f"Reading codes of {entity_id}") as repositories:
            return repositories.codes.read_codes(entity_id)

    def upsert_code(self, entity_id: str, record: CodeRecord) -> None:
        with self._transaction(f"Upserting {record.code} for {entity_id}") as repositories:
            repositories.codes.upsert_code(entity_id, record, seen_at=self._clock())

    def delete_codes(self, entity_id: str, codes: Sequence[str]) -> int:
        if not codes:
            return 0
        with self._transaction(f"Deleting codes of {entity_id}") as repositories:
            return repositories.codes.delete_codes(entity_id, codes)

    def update_entity_fields(
        self,
        entity_id: str,
        *,
        expired_codes: Sequence[str] | None = None,
        links: Mapping[LinkType, str] | None = None,
    ) -> None:
        with self._transaction(f"Updating {entity_id}") as repositories:
            repositories.entities.update_fields(
                entity_id,
                expired_codes=expired_codes,
                links=links,
                updated_at=self._clock(),
            )


if TYPE_CHECKING:
    _store_check: CodeStore = SqlAlchemyCodeStore()
