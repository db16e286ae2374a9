"""Ports for the persistence gateway.

The pipeline only needs a handful of store operations: paginated reads of
eligible entities, a fresh read of one entity's codes, the atomic single-row
code upsert, a batched delete by literal code and a field update on the entity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from redeemsync.domain.model import CodeRecord, LinkType, PersistedCodeRow, TrackedEntity


@runtime_checkable
class EntityRepository(Protocol):
    """Read eligible entities and write back entity-level fields."""

    def list_eligible(
        self,
        *,
        offset: int,
        limit: int,
        only: frozenset[str] | None = None,
    ) -> list[TrackedEntity]: ...

    def update_fields(
        self,
        entity_id: str,
        *,
        expired_codes: Sequence[str] | None = None,
        links: Mapping[LinkType, str] | None = None,
        updated_at: datetime | None = None,
    ) -> None: ...


@runtime_checkable
class CodeRepository(Protocol):
    """Keyed access to the code rows of one entity."""

    def read_codes(self, entity_id: str) -> list[PersistedCodeRow]: ...

    def upsert_code(self, entity_id: str, record: CodeRecord, *, seen_at: datetime) -> None: ...

    def delete_codes(self, entity_id: str, codes: Sequence[str]) -> int: ...


@runtime_checkable
class CodeStore(Protocol):
    """Transactional gateway used by the orchestrator, one transaction per call."""

    def list_eligible(
        self,
        *,
        offset: int,
        limit: int,
        only: frozenset[str] | None = None,
    ) -> list[TrackedEntity]: ...

    def read_codes(self, entity_id: str) -> list[PersistedCodeRow]: ...

    def upsert_code(self, entity_id: str, record: CodeRecord) -> None: ...

    def delete_codes(self, entity_id: str, codes: Sequence[str]) -> int: ...

    def update_entity_fields(
        self,
        entity_id: str,
        *,
        expired_codes: Sequence[str] | None = None,
        links: Mapping[LinkType, str] | None = None,
    ) -> None: ...
