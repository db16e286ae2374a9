"""Provider detection and the priorities used when sources disagree."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from redeemsync.domain.model import Provider

from .errors import UnsupportedSourceError

if TYPE_CHECKING:
    from collections.abc import Iterable

_HOST_SUFFIXES: dict[str, Provider] = {
    "robloxden.com": Provider.ROBLOXDEN,
    "beebom.com": Provider.BEEBOM,
    "destructoid.com": Provider.DESTRUCTOID,
}

CODE_PROVIDER_PRIORITY: tuple[Provider, ...] = (
    Provider.ROBLOXDEN,
    Provider.BEEBOM,
    Provider.DESTRUCTOID,
)
LINK_PROVIDER_PRIORITY: tuple[Provider, ...] = (
    Provider.BEEBOM,
    Provider.ROBLOXDEN,
    Provider.DESTRUCTOID,
)


def normalized_host(url: str) -> str:
    try:
        host = httpx.URL(url.strip()).host
    except httpx.InvalidURL:
        return ""
    host = host.lower()
    return host.removeprefix("www.")


def detect_provider(url: str) -> Provider:
    host = normalized_host(url)
    for suffix, provider in _HOST_SUFFIXES.items():
        if host == suffix or host.endswith("." + suffix):
            return provider
    raise UnsupportedSourceError(f"Unsupported source host: {host or url!r}", source_url=url)


def is_supported(url: str) -> bool:
    try:
        detect_provider(url)
    except UnsupportedSourceError:
        return False
    return True


def unique_urls(urls: Iterable[str]) -> list[str]:
    """Strip, drop blanks and duplicates, keep first-seen order."""

    seen: set[str] = set()
    result: list[str] = []
    for raw in urls:
        url = raw.strip() if isinstance(raw, str) else ""
        if not url or url in seen:
            continue
        seen.add(url)
        result.append(url)
    return result


def supported_sources(urls: Iterable[str]) -> list[str]:
    return [url for url in unique_urls(urls) if is_supported(url)]
