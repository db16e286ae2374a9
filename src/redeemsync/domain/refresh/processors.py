"""Per-entity work for each refresh pipeline.

A processor turns one entity into an ``EntityOutcome``. Skips are returned as
outcomes; failures are raised and turned into outcomes by the orchestrator.
Every store call runs in a worker thread, one transaction per call.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from redeemsync.domain.reconciliation import (
    ALL_LINKS_PRESENT,
    apply_reconciliation,
    plan_link_updates,
    reconcile_codes,
    reconcile_expired,
)
from redeemsync.domain.refresh.stats import EntityOutcome

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from redeemsync.domain.model import TrackedEntity
    from redeemsync.domain.ports import CodeExtractor, CodeStore, SocialLinkExtractor

    type SourceFilter = Callable[[Sequence[str]], list[str]]

log = getLogger(__name__)

MISSING_SOURCES = "missing source URLs"
UNSUPPORTED_SOURCES = "all sources disabled or unsupported"
NO_SOURCES_CONFIGURED = "no sources configured"


class EntityProcessor(Protocol):
    kind: str

    async def __call__(self, entity: TrackedEntity) -> EntityOutcome: ...


def _all_sources(urls: Sequence[str]) -> list[str]:
    return list(urls)


class CodeRefreshProcessor:
    """Scrape current codes, then upsert them and drop the ones no longer listed."""

    kind = "refresh-codes"

    def __init__(
        self,
        store: CodeStore,
        extractor: CodeExtractor,
        *,
        source_filter: SourceFilter = _all_sources,
        dry_run: bool = False,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._source_filter = source_filter
        self._dry_run = dry_run

    async def __call__(self, entity: TrackedEntity) -> EntityOutcome:
        if not entity.source_urls:
            return EntityOutcome.skipped(entity, MISSING_SOURCES)
        urls = self._source_filter(entity.source_urls)
        if not urls:
            return EntityOutcome.skipped(entity, UNSUPPORTED_SOURCES)

        # Must complete before any read or write; a raise here leaves the store untouched.
        extraction = await self._extractor.extract(urls)

        persisted = await asyncio.to_thread(self._store.read_codes, entity.id)
        result = reconcile_codes(entity.id, extraction.codes, persisted)

        removed = len(result.deletions)
        if not self._dry_run:
            removed = await asyncio.to_thread(apply_reconciliation, self._store, result)

        return EntityOutcome.ok(
            entity,
            found=len(extraction.codes),
            upserted=len(result.upserts),
            removed=removed,
            new_codes=len(result.new_codes),
            changed=result.has_changes,
        )


class ExpiredCodesProcessor:
    """Fold scraped and stored expired codes into the entity's expired list."""

    kind = "refresh-expired"

    def __init__(
        self,
        store: CodeStore,
        extractor: CodeExtractor,
        *,
        source_filter: SourceFilter = _all_sources,
        dry_run: bool = False,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._source_filter = source_filter
        self._dry_run = dry_run

    async def __call__(self, entity: TrackedEntity) -> EntityOutcome:
        if not entity.source_urls:
            return EntityOutcome.skipped(entity, MISSING_SOURCES)
        urls = self._source_filter(entity.source_urls)
        if not urls:
            return EntityOutcome.skipped(entity, UNSUPPORTED_SOURCES)

        extraction = await self._extractor.extract(urls)
        persisted = await asyncio.to_thread(self._store.read_codes, entity.id)
        result = reconcile_expired(entity, extraction.expired_codes, persisted)

        if not self._dry_run:
            # Persist the list before deleting the rows it absorbed.
            if result.changed:
                await asyncio.to_thread(
                    self._store.update_entity_fields,
                    entity.id,
                    expired_codes=result.expired_codes,
                )
            if result.deletions:
                await asyncio.to_thread(self._store.delete_codes, entity.id, result.deletions)

        return EntityOutcome.ok(
            entity,
            expired=len(result.expired_codes),
            removed=len(result.deletions),
            changed=result.has_changes,
        )


class SocialLinkProcessor:
    """Fill missing social link fields from the entity's source pages."""

    kind = "backfill-social-links"

    def __init__(
        self,
        store: CodeStore,
        extractor: SocialLinkExtractor,
        *,
        dry_run: bool = False,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._dry_run = dry_run

    async def __call__(self, entity: TrackedEntity) -> EntityOutcome:
        if not entity.missing_link_types:
            return EntityOutcome.skipped(entity, ALL_LINKS_PRESENT)
        if not entity.source_urls:
            return EntityOutcome.skipped(entity, NO_SOURCES_CONFIGURED)

        extraction = await self._extractor.extract_social_links(entity.source_urls)
        for message in extraction.errors:
            log.warning("%s: source error: %s", entity.slug, message)

        plan = plan_link_updates(entity, extraction)
        warnings = tuple(extraction.errors)
        if plan.reason is not None:
            return EntityOutcome.skipped(entity, plan.reason, warnings=warnings)

        if not self._dry_run:
            await asyncio.to_thread(
                self._store.update_entity_fields,
                entity.id,
                links=plan.updates,
            )
        for record in plan.applied:
            log.info(
                "%s: %s <- %s (%s)",
                entity.slug,
                record.type,
                record.provenance.provider,
                record.provenance.source_url,
            )
        return EntityOutcome.ok(
            entity,
            links_updated=tuple(plan.updates),
            changed=True,
            warnings=warnings,
        )
