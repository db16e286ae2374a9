"""Chunked, bounded concurrency over a list of work items."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from redeemsync.domain.model import TrackedEntity
    from redeemsync.domain.ports import CodeStore

log = getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]


async def run_bounded[T, R](
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
    delay_seconds: float = 0.0,
    sleep: Sleep = asyncio.sleep,
) -> list[R]:
    """Run ``worker`` over ``items`` in chunks of at most ``limit``.

    Every chunk is awaited as a whole before the next one starts, so at most
    ``limit`` workers are ever in flight. ``delay_seconds`` is slept between
    chunks, never after the last one. Results keep the order of ``items``.

    ``worker`` is expected to handle its own errors; an exception escaping it
    aborts the run.
    """

    if limit < 1:
        raise ValueError("limit must be at least 1")

    results: list[R] = []
    for start in range(0, len(items), limit):
        chunk = items[start : start + limit]
        results.extend(await asyncio.gather(*(worker(item) for item in chunk)))
        if delay_seconds > 0 and start + limit < len(items):
            await sleep(delay_seconds)
    return results


async def list_eligible_entities(
    store: CodeStore,
    *,
    page_size: int,
    only: frozenset[str] | None = None,
) -> list[TrackedEntity]:
    """Read every eligible entity page by page until a short page comes back."""

    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    entities: list[TrackedEntity] = []
    offset = 0
    while True:
        page = await asyncio.to_thread(
            store.list_eligible, offset=offset, limit=page_size, only=only
        )
        entities.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
    log.debug("Listed %d eligible entities", len(entities))
    return entities
