from __future__ import annotations

import asyncio

import pytest

from redeemsync.adapters.sources import ExtractionError, supported_sources
from redeemsync.domain.model import (
    CodeRecord,
    CodeStatus,
    ExtractionResult,
    FieldProvenance,
    LinkType,
    OutcomeStatus,
    Provider,
    SocialLinkExtraction,
)
from redeemsync.domain.reconciliation import ALL_LINKS_PRESENT, NO_NEW_LINKS
from redeemsync.domain.refresh import (
    MISSING_SOURCES,
    NO_SOURCES_CONFIGURED,
    UNSUPPORTED_SOURCES,
    CodeRefreshProcessor,
    ExpiredCodesProcessor,
    SocialLinkProcessor,
)
from tests.helpers.fakes import FakeCodeStore, FakeExtractor, codes, make_entity, make_row

SOURCE = "https://robloxden.com/game-codes/blox-fruits"


def test_code_refresh_reconciles_and_counts() -> None:
    entity = make_entity(source_urls=[SOURCE])
    store = FakeCodeStore(rows={entity.id: [make_row("OLD1"), make_row("KEEP")]})
    extraction = ExtractionResult(
        codes=(CodeRecord(code="KEEP"), CodeRecord(code="NEW1", is_new=True)),
    )
    processor = CodeRefreshProcessor(store, FakeExtractor({SOURCE: extraction}))

    outcome = asyncio.run(processor(entity))

    assert outcome.status is OutcomeStatus.OK
    assert (outcome.found, outcome.upserted, outcome.removed, outcome.new_codes) == (2, 2, 1, 1)
    assert outcome.changed
    assert {row.code for row in store.rows[entity.id]} == {"KEEP", "NEW1"}


def test_code_refresh_skips_without_sources() -> None:
    store = FakeCodeStore()
    processor = CodeRefreshProcessor(store, FakeExtractor())

    outcome = asyncio.run(processor(make_entity(source_urls=[])))

    assert outcome.status is OutcomeStatus.SKIPPED
    assert outcome.reason == MISSING_SOURCES
    assert store.calls == []


def test_code_refresh_skips_unsupported_sources() -> None:
    extractor = FakeExtractor()
    processor = CodeRefreshProcessor(
        FakeCodeStore(), extractor, source_filter=supported_sources
    )

    outcome = asyncio.run(processor(make_entity(source_urls=["https://example.com/codes"])))

    assert outcome.reason == UNSUPPORTED_SOURCES
    assert extractor.requested == []


def test_extraction_failure_leaves_store_untouched() -> None:
    entity = make_entity(source_urls=[SOURCE])
    store = FakeCodeStore(rows={entity.id: [make_row("OLD1")]})
    extractor = FakeExtractor({SOURCE: ExtractionError("Failed to fetch: 500", source_url=SOURCE)})
    processor = CodeRefreshProcessor(store, extractor)

    with pytest.raises(ExtractionError):
        asyncio.run(processor(entity))

    assert store.calls == []
    assert [row.code for row in store.rows[entity.id]] == ["OLD1"]


def test_code_refresh_dry_run_writes_nothing() -> None:
    entity = make_entity(source_urls=[SOURCE])
    store = FakeCodeStore(rows={entity.id: [make_row("OLD1")]})
    extractor = FakeExtractor({SOURCE: ExtractionResult(codes=codes("NEW1"))})
    processor = CodeRefreshProcessor(store, extractor, dry_run=True)

    outcome = asyncio.run(processor(entity))

    assert outcome.upserted == 1
    assert outcome.removed == 1
    assert store.writes_for(entity.id) == []


def test_expired_processor_updates_list_then_deletes_rows() -> None:
    entity = make_entity(source_urls=[SOURCE], expired_codes=["A"])
    store = FakeCodeStore(rows={entity.id: [make_row("B", CodeStatus.EXPIRED), make_row("LIVE")]})
    extractor = FakeExtractor({SOURCE: ExtractionResult(expired_codes=("C",))})

    outcome = asyncio.run(ExpiredCodesProcessor(store, extractor)(entity))

    assert outcome.status is OutcomeStatus.OK
    assert outcome.expired == 3
    assert outcome.removed == 1
    assert store.entity_updates == [(entity.id, {"expired_codes": ("A", "C", "B")})]
    assert store.writes_for(entity.id) == ["update", "delete"]
    assert [row.code for row in store.rows[entity.id]] == ["LIVE"]


def test_expired_processor_without_changes_does_not_write() -> None:
    entity = make_entity(source_urls=[SOURCE], expired_codes=["A"])
    store = FakeCodeStore()
    extractor = FakeExtractor({SOURCE: ExtractionResult(expired_codes=("a",))})

    outcome = asyncio.run(ExpiredCodesProcessor(store, extractor)(entity))

    assert not outcome.changed
    assert store.writes_for(entity.id) == []


def _links(**links: str) -> SocialLinkExtraction:
    provenance = FieldProvenance(Provider.BEEBOM, "https://beebom.com/codes")
    typed = {LinkType(name): url for name, url in links.items()}
    return SocialLinkExtraction(
        links=typed,
        provenance={link_type: provenance for link_type in typed},
        errors=["Failed to fetch https://destructoid.com/x: 404"],
    )


def test_link_processor_fills_missing_links() -> None:
    entity = make_entity(
        source_urls=["https://beebom.com/codes"],
        links={LinkType.ROBLOX: "https://www.roblox.com/games/1"},
    )
    store = FakeCodeStore()
    extractor = FakeExtractor(
        links={
            "https://beebom.com/codes": _links(
                roblox="https://www.roblox.com/games/2", discord="https://discord.gg/x"
            )
        }
    )

    outcome = asyncio.run(SocialLinkProcessor(store, extractor)(entity))

    assert outcome.status is OutcomeStatus.OK
    assert outcome.links_updated == (LinkType.DISCORD,)
    assert outcome.warnings == ("Failed to fetch https://destructoid.com/x: 404",)
    assert store.entity_updates == [(entity.id, {"links": {LinkType.DISCORD: "https://discord.gg/x"}})]


def test_link_processor_skip_reasons() -> None:
    store = FakeCodeStore()
    extractor = FakeExtractor(links={"https://beebom.com/codes": _links()})
    processor = SocialLinkProcessor(store, extractor)
    complete = make_entity(links={link_type: "https://x" for link_type in LinkType})

    assert asyncio.run(processor(complete)).reason == ALL_LINKS_PRESENT
    assert asyncio.run(processor(make_entity(source_urls=[]))).reason == NO_SOURCES_CONFIGURED
    assert (
        asyncio.run(processor(make_entity(source_urls=["https://beebom.com/codes"]))).reason
        == NO_NEW_LINKS
    )
    assert store.entity_updates == []
