from __future__ import annotations

from redeemsync.domain.model import CodeRecord, CodeStatus
from redeemsync.domain.reconciliation import apply_reconciliation, reconcile_codes
from tests.helpers.fakes import FakeCodeStore, codes, make_row

ENTITY_ID = "id-blox-fruits"


def _stored_codes(store: FakeCodeStore) -> set[str]:
    return {row.code for row in store.rows[ENTITY_ID]}


def test_new_codes_are_upserted_and_missing_ones_removed() -> None:
    persisted = [make_row("OLD1"), make_row("KEEP")]

    result = reconcile_codes(ENTITY_ID, codes("KEEP", "NEW1"), persisted)

    assert [record.code for record in result.upserts] == ["KEEP", "NEW1"]
    assert result.deletions == ("OLD1",)
    assert result.has_changes


def test_reformatted_code_is_not_a_removal() -> None:
    persisted = [make_row("SUMMER 2024")]

    result = reconcile_codes(ENTITY_ID, codes(" summer2024 "), persisted)

    assert result.deletions == ()
    assert [record.code for record in result.upserts] == ["summer2024"]


def test_terminal_rows_are_never_deleted() -> None:
    persisted = [make_row("GONE", CodeStatus.EXPIRED), make_row("CHECKME", CodeStatus.CHECK)]

    result = reconcile_codes(ENTITY_ID, (), persisted)

    assert result.deletions == ("CHECKME",)
    assert result.upserts == ()


def test_deletions_use_the_stored_literal() -> None:
    persisted = [make_row("  Spaced Code ")]

    result = reconcile_codes(ENTITY_ID, codes("OTHER"), persisted)

    assert result.deletions == ("  Spaced Code ",)


def test_duplicate_incoming_codes_collapse_to_first() -> None:
    incoming = (
        CodeRecord(code="DUP", rewards_text="first"),
        CodeRecord(code="dup", rewards_text="second"),
        CodeRecord(code="   "),
    )

    result = reconcile_codes(ENTITY_ID, incoming, [])

    assert len(result.upserts) == 1
    assert result.upserts[0].rewards_text == "first"


def test_new_codes_property_follows_is_new_flag() -> None:
    incoming = (CodeRecord(code="A", is_new=True), CodeRecord(code="B"))

    result = reconcile_codes(ENTITY_ID, incoming, [])

    assert [record.code for record in result.new_codes] == ["A"]


def test_apply_reconciliation_writes_then_deletes() -> None:
    store = FakeCodeStore(rows={ENTITY_ID: [make_row("OLD1"), make_row("KEEP")]})
    result = reconcile_codes(ENTITY_ID, codes("KEEP", "NEW1"), store.read_codes(ENTITY_ID))

    removed = apply_reconciliation(store, result)

    assert removed == 1
    assert _stored_codes(store) == {"KEEP", "NEW1"}
    assert store.writes_for(ENTITY_ID) == ["upsert", "upsert", "delete"]


def test_reconciling_twice_is_idempotent() -> None:
    store = FakeCodeStore(rows={ENTITY_ID: [make_row("OLD1")]})
    incoming = codes("A", "B")

    first = reconcile_codes(ENTITY_ID, incoming, store.read_codes(ENTITY_ID))
    apply_reconciliation(store, first)
    snapshot = _stored_codes(store)
    second = reconcile_codes(ENTITY_ID, incoming, store.read_codes(ENTITY_ID))
    apply_reconciliation(store, second)

    assert second.deletions == ()
    assert _stored_codes(store) == snapshot == {"A", "B"}
    assert len(store.rows[ENTITY_ID]) == 2
