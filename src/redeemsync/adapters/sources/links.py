"""Find and classify social links inside a provider's article content."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup

from redeemsync.domain.model import LinkType, Provider

if TYPE_CHECKING:
    from collections.abc import Iterable

TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "utm_name",
        "utm_reader",
        "utm_place",
        "utm_social",
        "utm_social-type",
        "ref",
        "mkt_tok",
    }
)

LINK_CONTAINERS: dict[Provider, str] = {
    Provider.ROBLOXDEN: ".section__side",
    Provider.BEEBOM: ".beebom-single-content.entry-content.highlight",
    Provider.DESTRUCTOID: ".wp-block-gamurs-article-content",
}

# The robloxden sidebar links to plenty of unrelated pages; only the game link is trusted.
LINK_TYPES_BY_PROVIDER: dict[Provider, frozenset[LinkType]] = {
    Provider.ROBLOXDEN: frozenset({LinkType.ROBLOX}),
}


def normalize_absolute_url(raw: str | None, base_url: str) -> str | None:
    """Resolve ``raw`` against ``base_url``; https only, no fragment or tracking params."""

    if not raw or not raw.strip():
        return None
    try:
        resolved = httpx.URL(base_url).join(raw.strip())
    except httpx.InvalidURL:
        return None
    if resolved.scheme not in {"http", "https"} or not resolved.host:
        return None
    params = [
        (key, value)
        for key, value in resolved.params.multi_items()
        if key not in TRACKING_PARAMS
    ]
    return str(resolved.copy_with(scheme="https", fragment=None, params=params))


def _host(url: httpx.URL) -> str:
    return url.host.lower().removeprefix("www.")


def classify_link(url: str) -> LinkType | None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return None
    host = _host(parsed)
    path = parsed.path.lower()

    if host == "roblox.com" or host.endswith(".roblox.com"):
        if "/games/" in path or "/game/" in path or {"placeId", "universeId"} & set(parsed.params):
            return LinkType.ROBLOX
        if "/communities/" in path or "/groups/" in path or "/users/" in path:
            return LinkType.COMMUNITY
        return None
    if host in {"discord.gg", "discord.com"} or host.endswith(".discord.com"):
        return LinkType.DISCORD
    if host in {"x.com", "twitter.com"} or host.endswith(".twitter.com"):
        return LinkType.TWITTER
    if host in {"youtube.com", "youtu.be"} or host.endswith(".youtube.com"):
        return LinkType.YOUTUBE
    return None


def first_link_per_type(
    hrefs: Iterable[str | None],
    base_url: str,
    *,
    allowed: frozenset[LinkType] | None = None,
) -> dict[LinkType, str]:
    links: dict[LinkType, str] = {}
    for href in hrefs:
        url = normalize_absolute_url(href, base_url)
        if url is None:
            continue
        link_type = classify_link(url)
        if link_type is None or link_type in links:
            continue
        if allowed is not None and link_type not in allowed:
            continue
        links[link_type] = url
    return links


def extract_links(html: str, provider: Provider, base_url: str) -> dict[LinkType, str]:
    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one(LINK_CONTAINERS[provider])
    if container is None:
        return {}
    hrefs = [anchor.get("href") for anchor in container.select("a[href]")]
    return first_link_per_type(
        (href if isinstance(href, str) else None for href in hrefs),
        base_url,
        allowed=LINK_TYPES_BY_PROVIDER.get(provider),
    )
