"""Drive a processor over every eligible entity with bounded concurrency."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from redeemsync.domain.model import OutcomeStatus
from redeemsync.domain.refresh.batch import list_eligible_entities, run_bounded
from redeemsync.domain.refresh.stats import EntityOutcome, RunStats

if TYPE_CHECKING:
    from redeemsync.config import RefreshConfig
    from redeemsync.domain.model import TrackedEntity
    from redeemsync.domain.ports import CodeStore, ContentChangedNotifier
    from redeemsync.domain.refresh.batch import Sleep
    from redeemsync.domain.refresh.processors import EntityProcessor

log = getLogger(__name__)


class RefreshOrchestrator:
    """List eligible entities, process them in chunks and collect the outcomes.

    Errors raised while processing one entity are caught here and recorded as
    a failure of that entity alone. Errors while listing entities propagate:
    without the list there is nothing meaningful to report.
    """

    def __init__(
        self,
        store: CodeStore,
        processor: EntityProcessor,
        config: RefreshConfig,
        *,
        notifier: ContentChangedNotifier | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._store = store
        self._processor = processor
        self._config = config
        self._notifier = notifier
        self._sleep = sleep

    async def run(self) -> RunStats:
        config = self._config
        stats = RunStats(kind=self._processor.kind, dry_run=config.dry_run)
        only = frozenset(config.only) or None

        log.info("%s run started", self._processor.kind)
        if only:
            log.info("Filtering to: %s", ", ".join(sorted(only)))

        entities = await list_eligible_entities(
            self._store, page_size=config.page_size, only=only
        )
        if not entities:
            log.info("No entities to refresh")
            return stats

        log.info(
            "Found %d entities to refresh (page size %d, concurrency %d)",
            len(entities),
            config.page_size,
            config.concurrency,
        )

        async def worker(entity: TrackedEntity) -> EntityOutcome:
            outcome = await self._process_one(entity)
            stats.record(outcome)
            _log_outcome(outcome)
            return outcome

        await run_bounded(
            entities,
            worker,
            limit=config.concurrency,
            delay_seconds=config.batch_delay_seconds,
            sleep=self._sleep,
        )

        log.info("%s summary", self._processor.kind)
        for line in stats.summary_lines():
            log.info("  %s", line)
        return stats

    async def _process_one(self, entity: TrackedEntity) -> EntityOutcome:
        try:
            outcome = await self._processor(entity)
        except Exception as exc:  # noqa: BLE001
            log.debug("Processing %s failed", entity.slug, exc_info=True)
            return EntityOutcome.failed(entity, exc)

        if outcome.status is OutcomeStatus.OK and outcome.changed and not self._config.dry_run:
            await self._notify(entity)
        return outcome

    async def _notify(self, entity: TrackedEntity) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.content_changed(entity)
        except Exception:  # noqa: BLE001
            log.warning("Change notification for %s failed", entity.slug, exc_info=True)


def _log_outcome(outcome: EntityOutcome) -> None:
    if outcome.status is OutcomeStatus.OK:
        details: list[str] = []
        if outcome.found or outcome.upserted:
            details += [f"found {outcome.found}", f"upserted {outcome.upserted}"]
        if outcome.removed:
            details.append(f"removed {outcome.removed}")
        if outcome.new_codes:
            details.append(f"new {outcome.new_codes}")
        if outcome.expired:
            details.append(f"expired tracked {outcome.expired}")
        if outcome.links_updated:
            details.append("links " + ", ".join(outcome.links_updated))
        log.info("ok %s: %s", outcome.slug, ", ".join(details) or "no changes")
    elif outcome.status is OutcomeStatus.SKIPPED:
        log.info("skipped %s (%s)", outcome.slug, outcome.reason)
    else:
        log.error("failed %s: %s", outcome.slug, outcome.error)
