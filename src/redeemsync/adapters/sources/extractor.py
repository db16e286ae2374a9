"""Fetch source pages and turn them into merged codes and social links."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from redeemsync.domain.merge import ProviderResult, merge_by_priority
from redeemsync.domain.model import (
    CodeRecord,
    CodeStatus,
    ExtractionResult,
    SocialLinkExtraction,
)
from redeemsync.domain.normalization import dedupe_codes, normalize_code_key

from .errors import ExtractionError
from .links import extract_links
from .parsing import parse_codes_page
from .providers import (
    CODE_PROVIDER_PRIORITY,
    LINK_PROVIDER_PRIORITY,
    detect_provider,
    unique_urls,
)
from .schema import ScrapedPage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from redeemsync.adapters.http_resilience import ResilientClient
    from redeemsync.domain.model import LinkType

log = getLogger(__name__)

_MERGED_FIELDS = ("code", "rewards_text", "level_requirement")


class SourceExtractor:
    """Scrape code pages through a shared ``ResilientClient``.

    Sources of one entity are fetched one after the other so a single entity
    never hammers several pages of the same host at once; concurrency comes
    from processing several entities in parallel.
    """

    def __init__(self, client: ResilientClient) -> None:
        self._client = client

    async def extract(self, urls: Sequence[str]) -> ExtractionResult:
        pages: list[ScrapedPage] = []
        for url in unique_urls(urls):
            provider = detect_provider(url)
            html = await self._fetch_html(url)
            codes, expired = parse_codes_page(html, provider)
            try:
                page = ScrapedPage.model_validate(
                    {
                        "provider": provider,
                        "source_url": url,
                        "codes": [{**code, "provider": provider} for code in codes],
                        "expired_codes": expired,
                    }
                )
            except ValidationError as exc:
                raise ExtractionError(
                    f"Unexpected extraction result from {url}: {exc.error_count()} error(s)",
                    source_url=url,
                ) from exc
            log.debug(
                "%s: %d code(s), %d expired from %s",
                provider,
                len(page.codes),
                len(page.expired_codes),
                url,
            )
            pages.append(page)
        return merge_pages(pages)

    async def extract_social_links(self, urls: Sequence[str]) -> SocialLinkExtraction:
        results: list[ProviderResult[LinkType]] = []
        errors: list[str] = []
        for url in unique_urls(urls):
            try:
                provider = detect_provider(url)
                html = await self._fetch_html(url)
            except ExtractionError as exc:
                errors.append(str(exc))
                continue
            results.append(ProviderResult(provider, url, extract_links(html, provider, url)))

        merged = merge_by_priority(results, LINK_PROVIDER_PRIORITY)
        return SocialLinkExtraction(
            links={link_type: str(url) for link_type, url in merged.fields.items()},
            provenance=merged.provenance,
            errors=errors,
        )

    async def _fetch_html(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Failed to fetch {url}: {exc}", source_url=url) from exc
        if not response.is_success:
            raise ExtractionError(
                f"Failed to fetch {url}: {response.status_code}",
                source_url=url,
            )
        return response.text


def merge_pages(pages: Sequence[ScrapedPage]) -> ExtractionResult:
    """Merge per-page codes by normalized key.

    Display code, rewards and level come from the highest-priority provider
    that has them. A code is active if any source lists it as active and new
    if any source marks it new.
    """

    rank = {provider: index for index, provider in enumerate(CODE_PROVIDER_PRIORITY)}
    ordered = sorted(pages, key=lambda page: rank.get(page.provider, len(rank)))

    candidates: dict[str, list[ProviderResult[str]]] = {}
    statuses: dict[str, set[CodeStatus]] = {}
    fresh: dict[str, bool] = {}
    for page in ordered:
        for scraped in page.codes:
            key = normalize_code_key(scraped.code)
            if key is None:
                continue
            fields = {name: getattr(scraped, name) for name in _MERGED_FIELDS}
            candidates.setdefault(key, []).append(
                ProviderResult(page.provider, page.source_url, fields)
            )
            statuses.setdefault(key, set()).add(scraped.status)
            fresh[key] = fresh.get(key, False) or scraped.is_new

    codes: list[CodeRecord] = []
    for key, results in candidates.items():
        merged = merge_by_priority(results)
        status = CodeStatus.ACTIVE if CodeStatus.ACTIVE in statuses[key] else CodeStatus.CHECK
        codes.append(
            CodeRecord(
                code=str(merged.fields["code"]),
                status=status,
                rewards_text=_optional_str(merged.fields.get("rewards_text")),
                level_requirement=_optional_int(merged.fields.get("level_requirement")),
                is_new=fresh[key],
                provider=merged.provenance["code"].provider,
            )
        )

    expired = dedupe_codes([code for page in ordered for code in page.expired_codes])
    return ExtractionResult(codes=tuple(codes), expired_codes=tuple(expired))


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _optional_int(value: object) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None
