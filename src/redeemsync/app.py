"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from redeemsync.adapters.http_resilience import ResilientClient
from redeemsync.adapters.notifications import NullNotifier, RevalidationNotifier
from redeemsync.adapters.sources import SourceExtractor, supported_sources
from redeemsync.adapters.sqlalchemy import SqlAlchemyCodeStore, is_started, startup
from redeemsync.adapters.summary import write_summary
from redeemsync.config import get_run_config, get_sources_config
from redeemsync.domain.refresh import (
    CodeRefreshProcessor,
    ExpiredCodesProcessor,
    RefreshOrchestrator,
    SocialLinkProcessor,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from redeemsync.config import ResilienceConfig, RevalidationConfig, RunConfig
    from redeemsync.domain.model import SocialLinkExtraction
    from redeemsync.domain.ports import CodeStore, ContentChangedNotifier
    from redeemsync.domain.refresh import EntityProcessor, RunStats

    type ClientFactory = Callable[[ResilienceConfig], ResilientClient]
    type ProcessorFactory = Callable[[CodeStore, SourceExtractor, bool], EntityProcessor]


log = getLogger(__name__)


def _code_processor(store: CodeStore, extractor: SourceExtractor, dry_run: bool) -> EntityProcessor:
    return CodeRefreshProcessor(store, extractor, source_filter=supported_sources, dry_run=dry_run)


def _expired_processor(
    store: CodeStore, extractor: SourceExtractor, dry_run: bool
) -> EntityProcessor:
    return ExpiredCodesProcessor(store, extractor, source_filter=supported_sources, dry_run=dry_run)


def _link_processor(store: CodeStore, extractor: SourceExtractor, dry_run: bool) -> EntityProcessor:
    return SocialLinkProcessor(store, extractor, dry_run=dry_run)


def refresh_codes(
    config: RunConfig | None = None,
    *,
    store: CodeStore | None = None,
    client_factory: ClientFactory = ResilientClient,
) -> RunStats:
    """Scrape every eligible entity's sources and reconcile its code rows."""

    return _run_pipeline(_code_processor, config, store=store, client_factory=client_factory)


def refresh_expired_codes(
    config: RunConfig | None = None,
    *,
    store: CodeStore | None = None,
    client_factory: ClientFactory = ResilientClient,
) -> RunStats:
    """Fold expired codes into each entity's expired list and drop expired rows."""

    return _run_pipeline(_expired_processor, config, store=store, client_factory=client_factory)


def backfill_social_links(
    config: RunConfig | None = None,
    *,
    store: CodeStore | None = None,
    client_factory: ClientFactory = ResilientClient,
) -> RunStats:
    """Fill missing social link fields from each entity's source pages."""

    return _run_pipeline(_link_processor, config, store=store, client_factory=client_factory)


def preview_social_links(
    urls: Sequence[str],
    *,
    sources: ResilienceConfig | None = None,
    client_factory: ClientFactory = ResilientClient,
) -> SocialLinkExtraction:
    """Scrape links from ``urls`` without touching the store."""

    resilience = sources or get_sources_config()

    async def preview() -> SocialLinkExtraction:
        async with client_factory(resilience) as client:
            return await SourceExtractor(client).extract_social_links(urls)

    return asyncio.run(preview())


def _run_pipeline(
    build_processor: ProcessorFactory,
    config: RunConfig | None,
    *,
    store: CodeStore | None,
    client_factory: ClientFactory,
) -> RunStats:
    # Settings must resolve before the store is started.
    effective_config = config or get_run_config()
    effective_store = store or _default_store()

    stats = asyncio.run(_run(build_processor, effective_config, effective_store, client_factory))

    summary_path = effective_config.refresh.summary_path
    if summary_path is not None:
        write_summary(summary_path, stats)
    return stats


async def _run(
    build_processor: ProcessorFactory,
    config: RunConfig,
    store: CodeStore,
    client_factory: ClientFactory,
) -> RunStats:
    async with AsyncExitStack() as stack:
        client = await stack.enter_async_context(client_factory(config.sources))
        processor = build_processor(store, SourceExtractor(client), config.refresh.dry_run)
        notifier = await _build_notifier(stack, config.revalidation, client_factory)
        orchestrator = RefreshOrchestrator(store, processor, config.refresh, notifier=notifier)
        return await orchestrator.run()


async def _build_notifier(
    stack: AsyncExitStack,
    revalidation: RevalidationConfig | None,
    client_factory: ClientFactory,
) -> ContentChangedNotifier:
    if revalidation is None:
        log.info("Revalidation hook not configured; changes will not be announced")
        return NullNotifier()
    client = await stack.enter_async_context(client_factory(revalidation.resilience))
    return RevalidationNotifier(revalidation, client)


def _default_store() -> CodeStore:
    if not is_started():
        startup()
    return SqlAlchemyCodeStore()
