"""Fold expired codes into the entity's ``expired_codes`` list.

Runs independently of the code reconciler. It only ever touches rows in the
terminal ``expired`` status, which the code reconciler leaves alone, so the
two passes cannot race on the same rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from redeemsync.domain.model import TERMINAL_STATUSES
from redeemsync.domain.normalization import dedupe_codes

if TYPE_CHECKING:
    from collections.abc import Iterable

    from redeemsync.domain.model import PersistedCodeRow, TrackedEntity


@dataclass(frozen=True, slots=True)
class ExpiredReconcileResult:
    expired_codes: tuple[str, ...]
    deletions: tuple[str, ...] = ()
    changed: bool = False

    @property
    def has_changes(self) -> bool:
        return self.changed or bool(self.deletions)


def reconcile_expired(
    entity: TrackedEntity,
    scraped_expired: Iterable[str],
    persisted: Iterable[PersistedCodeRow],
) -> ExpiredReconcileResult:
    expired_rows = [row for row in persisted if row.status in TERMINAL_STATUSES]
    merged = dedupe_codes(
        [*entity.expired_codes, *scraped_expired, *(row.code for row in expired_rows)]
    )
    changed = tuple(merged) != tuple(entity.expired_codes)
    return ExpiredReconcileResult(
        expired_codes=tuple(merged),
        deletions=tuple(row.code for row in expired_rows),
        changed=changed,
    )
