"""Diff freshly scraped codes against the persisted rows of one entity.

Two invariants hold for every result:

- a persisted row is only deleted when its status is mutable and its
  normalized key is absent from the incoming set, so a reformatted code is
  never treated as removed and expired rows are never touched here;
- every incoming code is upserted, which keeps ``last_seen_at`` moving for
  codes that are still listed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from redeemsync.domain.model import MUTABLE_STATUSES
from redeemsync.domain.normalization import normalize_code_key, sanitize_code_display

if TYPE_CHECKING:
    from collections.abc import Iterable

    from redeemsync.domain.model import CodeRecord, PersistedCodeRow
    from redeemsync.domain.ports import CodeStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    entity_id: str
    upserts: tuple[CodeRecord, ...] = ()
    deletions: tuple[str, ...] = ()

    @property
    def new_codes(self) -> tuple[CodeRecord, ...]:
        return tuple(record for record in self.upserts if record.is_new)

    @property
    def has_changes(self) -> bool:
        return bool(self.upserts or self.deletions)


def dedupe_records(incoming: Iterable[CodeRecord]) -> list[CodeRecord]:
    """Keep the first record per normalized key, with its display code sanitized."""

    seen: set[str] = set()
    records: list[CodeRecord] = []
    for record in incoming:
        display = sanitize_code_display(record.code)
        key = normalize_code_key(display)
        if display is None or key is None or key in seen:
            continue
        seen.add(key)
        records.append(record if record.code == display else replace(record, code=display))
    return records


def reconcile_codes(
    entity_id: str,
    incoming: Iterable[CodeRecord],
    persisted: Iterable[PersistedCodeRow],
) -> ReconcileResult:
    upserts = dedupe_records(incoming)
    incoming_keys = {normalize_code_key(record.code) for record in upserts}

    deletions: list[str] = []
    for row in persisted:
        if row.status not in MUTABLE_STATUSES:
            continue
        if normalize_code_key(row.code) in incoming_keys:
            continue
        deletions.append(row.code)

    return ReconcileResult(
        entity_id=entity_id,
        upserts=tuple(upserts),
        deletions=tuple(deletions),
    )


def apply_reconciliation(store: CodeStore, result: ReconcileResult) -> int:
    """Write ``result`` through ``store``: every upsert, then one batched delete.

    Returns the number of rows the store reported as deleted.
    """

    for record in result.upserts:
        store.upsert_code(result.entity_id, record)
    if not result.deletions:
        return 0
    removed = store.delete_codes(result.entity_id, result.deletions)
    log.debug("Deleted %d stale code(s) for %s", removed, result.entity_id)
    return removed
