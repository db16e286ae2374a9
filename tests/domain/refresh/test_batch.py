from __future__ import annotations

import asyncio

import pytest

from redeemsync.domain.refresh import list_eligible_entities, run_bounded
from tests.helpers.fakes import FakeCodeStore, InFlightCounter, make_entity


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def test_never_more_than_limit_in_flight() -> None:
    counter = InFlightCounter()

    async def worker(item: int) -> int:
        with counter:
            await asyncio.sleep(0.001 * (item % 3))
        return item * 2

    results = asyncio.run(run_bounded(list(range(11)), worker, limit=4))

    assert results == [item * 2 for item in range(11)]
    assert counter.peak == 4


def test_chunk_waits_for_its_slowest_worker() -> None:
    events: list[str] = []

    async def worker(item: str) -> str:
        await asyncio.sleep(0.02 if item == "slow" else 0)
        events.append(item)
        return item

    asyncio.run(run_bounded(["slow", "fast", "next"], worker, limit=2))

    assert events == ["fast", "slow", "next"]


def test_delay_between_chunks_but_not_after_last() -> None:
    sleep = RecordingSleep()

    async def worker(item: int) -> int:
        return item

    asyncio.run(run_bounded(list(range(5)), worker, limit=2, delay_seconds=0.5, sleep=sleep))

    assert sleep.calls == [0.5, 0.5]


def test_single_chunk_has_no_delay() -> None:
    sleep = RecordingSleep()

    async def worker(item: int) -> int:
        return item

    asyncio.run(run_bounded([1, 2], worker, limit=2, delay_seconds=1.0, sleep=sleep))

    assert sleep.calls == []


def test_limit_must_be_positive() -> None:
    async def worker(item: int) -> int:
        return item

    with pytest.raises(ValueError, match="limit"):
        asyncio.run(run_bounded([1], worker, limit=0))


def test_list_eligible_pages_until_short_page() -> None:
    store = FakeCodeStore(entities=[make_entity(f"game-{index}") for index in range(5)])

    entities = asyncio.run(list_eligible_entities(store, page_size=2))

    assert len(entities) == 5
    assert store.list_calls == [(0, 2), (2, 2), (4, 2)]


def test_list_eligible_reads_an_extra_page_on_exact_multiple() -> None:
    store = FakeCodeStore(entities=[make_entity(f"game-{index}") for index in range(4)])

    entities = asyncio.run(list_eligible_entities(store, page_size=2))

    assert len(entities) == 4
    assert store.list_calls == [(0, 2), (2, 2), (4, 2)]
