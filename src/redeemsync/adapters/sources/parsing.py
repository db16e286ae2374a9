"""Generic HTML rules for pulling codes out of a source page.

Code pages come in two shapes. Item lists carry one code per element with
badges for status and freshness. Article pages put codes into tables
(``code | reward``) or bullet lists (``CODE: reward``) under headings, and
keep expired codes under a heading that says so.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from redeemsync.domain.model import CodeStatus, Provider

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

type RawCode = dict[str, object]
type PageParser = Callable[[BeautifulSoup], tuple[list[RawCode], list[str]]]

NEW_MARKER = re.compile(r"\(\s*new\s*\)", re.IGNORECASE)
EXPIRED_HEADING = re.compile(r"\b(expired|inactive|old)\b", re.IGNORECASE)
LEVEL_PATTERN = re.compile(r"(?:level|lvl)\s*[:\-]?\s*(\d{1,4})", re.IGNORECASE)
_QUOTES = re.compile(r"[`\"'“”‘’]")
_CODE_PREFIX = re.compile(r"^code[:\s-]*", re.IGNORECASE)
_MAX_CODE_LENGTH = 64

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_CONTENT_ROOTS = "article, main, .entry-content, .wp-block-gamurs-article-content"
_AD_SELECTORS = ".table__ad-placement-row, .codes-list__ad, .codes-list__promo, [data-ad-slot]"
_NEW_BADGES = ".badge--new, .badge--fresh, .badge--just-in, .codes-list__new-badge"


def strip_new_marker(text: str) -> tuple[str, bool]:
    is_new = NEW_MARKER.search(text) is not None
    return NEW_MARKER.sub("", text).strip(), is_new


def clean_code(raw: str) -> str | None:
    code = _QUOTES.sub("", raw).strip()
    code = _CODE_PREFIX.sub("", code).strip()
    if not code or len(code) > _MAX_CODE_LENGTH:
        return None
    return code


def clean_reward(raw: str) -> str | None:
    text = " ".join(raw.split())
    return text or None


def parse_level(text: str | None) -> int | None:
    if not text:
        return None
    match = LEVEL_PATTERN.search(text)
    return int(match.group(1)) if match else None


def _text(node: Tag) -> str:
    return node.get_text(" ", strip=True)


# Item lists


def _item_code(item: Tag) -> str | None:
    editable = item.select_one("[contenteditable]")
    if editable is not None and _text(editable):
        return _text(editable)
    terms = item.get("data-search-terms")
    if isinstance(terms, str):
        try:
            parsed = json.loads(terms)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list) and parsed:
            return str(parsed[0]).strip()  # pyright: ignore[reportUnknownArgumentType]
    for attr in ("data-copy", "data-code", "data-clipboard-text"):
        holder = item.select_one(f"[{attr}]")
        value = holder.get(attr) if holder is not None else None
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _item_status(item: Tag) -> CodeStatus:
    if item.select_one('[data-expired="true"], .badge--inactive, .badge--expired') is not None:
        return CodeStatus.EXPIRED
    if item.select_one(".badge--check") is not None:
        return CodeStatus.CHECK
    return CodeStatus.ACTIVE


def parse_item_list(soup: BeautifulSoup) -> tuple[list[RawCode], list[str]]:
    codes: list[RawCode] = []
    expired: list[str] = []
    for item in soup.select(".codes-list__item"):
        if item.select_one(_AD_SELECTORS) is not None or item.has_attr("data-ad-slot"):
            continue
        raw_code = _item_code(item)
        code = clean_code(raw_code) if raw_code else None
        if code is None:
            continue
        status = _item_status(item)
        if status is CodeStatus.EXPIRED:
            expired.append(code)
            continue
        reward_node = item.select_one(".codes-list__description, .codes-list__rewards")
        reward = clean_reward(_text(reward_node)) if reward_node is not None else None
        codes.append(
            {
                "code": code,
                "status": status,
                "rewards_text": reward,
                "level_requirement": parse_level(reward) or parse_level(_text(item)),
                "is_new": item.select_one(_NEW_BADGES) is not None,
            }
        )
    return codes, expired


# Article pages


def _content_root(soup: BeautifulSoup) -> Tag:
    root = soup.select_one(_CONTENT_ROOTS)
    return root if root is not None else soup


def _is_heading(tag: Tag) -> bool:
    return tag.name in _HEADINGS or "game-title" in (tag.get_attribute_list("class") or [])


def _section_heading(node: Tag) -> str:
    heading = node.find_previous(_is_heading)
    return _text(heading) if isinstance(heading, Tag) else ""


def _table_rows(table: Tag) -> Iterator[tuple[str, str]]:
    for row in table.select("tr"):
        cells = row.find_all("td", recursive=False)
        if len(cells) < 2:  # noqa: PLR2004
            continue
        code_cell, reward_cell = cells[0], cells[1]
        strong = code_cell.find("strong")
        code_text = _text(strong) if isinstance(strong, Tag) and _text(strong) else _text(code_cell)
        # A "(new)" marker may sit next to the bold code rather than inside it.
        if NEW_MARKER.search(_text(code_cell)) and not NEW_MARKER.search(code_text):
            code_text = f"{code_text} (new)"
        yield code_text, _text(reward_cell)


def _list_rows(listing: Tag) -> Iterator[tuple[str, str]]:
    for item in listing.find_all("li", recursive=False):
        before, sep, after = _text(item).partition(":")
        if not sep:
            continue
        yield before, after


def parse_article(soup: BeautifulSoup) -> tuple[list[RawCode], list[str]]:
    codes: list[RawCode] = []
    expired: list[str] = []
    root = _content_root(soup)
    for container in root.select("table, ul, ol"):
        rows = _table_rows(container) if container.name == "table" else _list_rows(container)
        in_expired_section = EXPIRED_HEADING.search(_section_heading(container)) is not None
        for raw_code, raw_reward in rows:
            code_text, code_new = strip_new_marker(raw_code)
            reward_text, reward_new = strip_new_marker(raw_reward)
            code = clean_code(code_text)
            # Prose bullets such as "Step 1: open the menu" are not codes.
            if code is None or " " in code:
                continue
            if in_expired_section:
                expired.append(code)
                continue
            reward = clean_reward(reward_text)
            codes.append(
                {
                    "code": code,
                    "status": CodeStatus.ACTIVE,
                    "rewards_text": reward,
                    "level_requirement": parse_level(reward),
                    "is_new": code_new or reward_new,
                }
            )
    return codes, expired


PAGE_PARSERS: dict[Provider, PageParser] = {
    Provider.ROBLOXDEN: parse_item_list,
    Provider.BEEBOM: parse_article,
    Provider.DESTRUCTOID: parse_article,
}


def parse_codes_page(html: str, provider: Provider) -> tuple[list[RawCode], list[str]]:
    """Return ``(codes, expired_codes)`` found on a page of ``provider``."""

    soup = BeautifulSoup(html, "html.parser")
    return PAGE_PARSERS[provider](soup)
