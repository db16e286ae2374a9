from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from redeemsync.adapters.http_resilience import ResilientClient
from redeemsync.adapters.sources import (
    ExtractionError,
    ScrapedCode,
    ScrapedPage,
    SourceExtractor,
    UnsupportedSourceError,
    merge_pages,
)
from redeemsync.config import ResilienceConfig, RetryPolicy
from redeemsync.domain.model import CodeStatus, LinkType, Provider

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

ROBLOXDEN_URL = "https://robloxden.com/game-codes/blox-fruits"
BEEBOM_URL = "https://beebom.com/roblox-blox-fruits-codes/"
DESTRUCTOID_URL = "https://www.destructoid.com/blox-fruits-codes/"

ROBLOXDEN_HTML = """
<aside class="section__side">
  <a href="https://www.roblox.com/games/1/Blox-Fruits">Play</a>
  <a href="https://discord.gg/robloxden">Discord</a>
</aside>
<ul>
  <li class="codes-list__item">
    <span contenteditable="true">SUMMER24</span>
    <p class="codes-list__description">2x XP</p>
  </li>
  <li class="codes-list__item">
    <span contenteditable="true">RARECODE</span>
    <span class="badge badge--check">Check</span>
  </li>
  <li class="codes-list__item">
    <span contenteditable="true">GONE1</span>
    <span class="badge badge--expired">Expired</span>
  </li>
</ul>
"""

BEEBOM_HTML = """
<div class="beebom-single-content entry-content highlight">
  <a href="https://www.roblox.com/games/2/Other">Play</a>
  <a href="https://discord.gg/beebom-found">Discord</a>
  <h2>Working codes</h2>
  <ul>
    <li>summer24: 2x XP for 20 minutes (new)</li>
    <li>BEEBOMONLY: 100 gems</li>
  </ul>
  <h2>Expired codes</h2>
  <ul><li>gone1: old</li><li>GONE2: old</li></ul>
</div>
"""


def _run[T](
    pages: Mapping[str, httpx.Response],
    action: Callable[[SourceExtractor], Awaitable[T]],
) -> tuple[T, list[str]]:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return pages.get(str(request.url), httpx.Response(404, text="missing"))

    async def run() -> T:
        config = ResilienceConfig(name="sources", retry=RetryPolicy(max_retries=0))
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await action(SourceExtractor(client))

    return asyncio.run(run()), requested


def test_extract_merges_sources_by_priority() -> None:
    pages = {
        ROBLOXDEN_URL: httpx.Response(200, text=ROBLOXDEN_HTML),
        BEEBOM_URL: httpx.Response(200, text=BEEBOM_HTML),
    }

    result, requested = _run(
        pages, lambda extractor: extractor.extract([BEEBOM_URL, ROBLOXDEN_URL, BEEBOM_URL])
    )

    assert requested == [BEEBOM_URL, ROBLOXDEN_URL]
    by_code = {record.code: record for record in result.codes}
    assert set(by_code) == {"SUMMER24", "RARECODE", "BEEBOMONLY"}
    summer = by_code["SUMMER24"]
    assert summer.rewards_text == "2x XP"
    assert summer.provider is Provider.ROBLOXDEN
    assert summer.is_new is True
    assert by_code["RARECODE"].status is CodeStatus.CHECK
    assert by_code["BEEBOMONLY"].provider is Provider.BEEBOM
    assert result.expired_codes == ("GONE1", "GONE2")


def test_extract_fails_when_any_source_fails() -> None:
    pages = {ROBLOXDEN_URL: httpx.Response(200, text=ROBLOXDEN_HTML)}

    with pytest.raises(ExtractionError, match="404") as exc:
        _run(pages, lambda extractor: extractor.extract([ROBLOXDEN_URL, BEEBOM_URL]))

    assert exc.value.source_url == BEEBOM_URL


def test_extract_rejects_unsupported_hosts() -> None:
    with pytest.raises(UnsupportedSourceError):
        _run({}, lambda extractor: extractor.extract(["https://example.com/codes"]))


def test_social_links_merge_and_collect_errors() -> None:
    pages = {
        ROBLOXDEN_URL: httpx.Response(200, text=ROBLOXDEN_HTML),
        BEEBOM_URL: httpx.Response(200, text=BEEBOM_HTML),
    }

    result, _ = _run(
        pages,
        lambda extractor: extractor.extract_social_links(
            [ROBLOXDEN_URL, DESTRUCTOID_URL, BEEBOM_URL, "https://example.com/x"]
        ),
    )

    assert result.links == {
        LinkType.ROBLOX: "https://www.roblox.com/games/2/Other",
        LinkType.DISCORD: "https://discord.gg/beebom-found",
    }
    assert result.provenance[LinkType.ROBLOX].provider is Provider.BEEBOM
    assert len(result.errors) == 2
    assert any(DESTRUCTOID_URL in error for error in result.errors)
    assert any("example.com" in error for error in result.errors)


def test_merge_pages_prefers_robloxden_display_and_any_active_status() -> None:
    pages = [
        ScrapedPage(
            provider=Provider.DESTRUCTOID,
            source_url=DESTRUCTOID_URL,
            codes=[
                ScrapedCode(code="Mixed", provider=Provider.DESTRUCTOID, level_requirement=5),
            ],
        ),
        ScrapedPage(
            provider=Provider.ROBLOXDEN,
            source_url=ROBLOXDEN_URL,
            codes=[
                ScrapedCode(code="MIXED", status=CodeStatus.CHECK, provider=Provider.ROBLOXDEN),
            ],
        ),
    ]

    result = merge_pages(pages)

    (record,) = result.codes
    assert record.code == "MIXED"
    assert record.status is CodeStatus.ACTIVE
    assert record.level_requirement == 5
    assert record.provider is Provider.ROBLOXDEN


def test_scraped_code_validation() -> None:
    with pytest.raises(ValueError, match="non-blank"):
        ScrapedCode(code="   ", provider=Provider.BEEBOM)
    with pytest.raises(ValueError, match="expired"):
        ScrapedCode(code="X", status=CodeStatus.EXPIRED, provider=Provider.BEEBOM)

    code = ScrapedCode(code=" X ", rewards_text="  ", provider=Provider.BEEBOM)

    assert code.code == "X"
    assert code.rewards_text is None
