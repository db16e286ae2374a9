"""Value objects passed between the pipeline stages.

Everything here is frozen: entities and records are handed to concurrent
per-entity tasks by value, so no task can observe another task's mutations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import CodeStatus, LinkType, Provider

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

MAX_SOURCE_URLS = 3


@dataclass(frozen=True, slots=True, kw_only=True)
class TrackedEntity:
    """A game page whose codes and links are refreshed from external sources."""

    id: str
    slug: str
    name: str
    source_urls: tuple[str, ...] = ()
    is_published: bool = True
    expired_codes: tuple[str, ...] = ()
    links: Mapping[LinkType, str] = field(default_factory=dict["LinkType", str])

    def __post_init__(self) -> None:
        cleaned = tuple(url.strip() for url in self.source_urls if url and url.strip())
        if len(cleaned) > MAX_SOURCE_URLS:
            raise ValueError(f"Entity {self.slug} has more than {MAX_SOURCE_URLS} source URLs")
        object.__setattr__(self, "source_urls", cleaned)

    @property
    def missing_link_types(self) -> tuple[LinkType, ...]:
        return tuple(link_type for link_type in LinkType if not self.links.get(link_type))

    def matches(self, keys: frozenset[str]) -> bool:
        return self.id in keys or self.slug in keys


@dataclass(frozen=True, slots=True, kw_only=True)
class CodeRecord:
    code: str
    status: CodeStatus = CodeStatus.ACTIVE
    rewards_text: str | None = None
    level_requirement: int | None = None
    is_new: bool | None = None
    provider: Provider | None = None


@dataclass(frozen=True, slots=True)
class FieldProvenance:
    """Which provider (and page) contributed a merged value."""

    provider: Provider
    source_url: str


@dataclass(frozen=True, slots=True)
class LinkRecord:
    type: LinkType
    url: str
    provenance: FieldProvenance


@dataclass(frozen=True, slots=True, kw_only=True)
class PersistedCodeRow:
    entity_id: str
    code: str
    status: CodeStatus
    rewards_text: str | None = None
    level_requirement: int | None = None
    is_new: bool = False
    first_seen_at: datetime | None = None
    last_seen_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Merged outcome of scraping every source of one entity."""

    codes: tuple[CodeRecord, ...] = ()
    expired_codes: tuple[str, ...] = ()


@dataclass(slots=True)
class SocialLinkExtraction:
    links: dict[LinkType, str] = field(default_factory=dict["LinkType", str])
    provenance: dict[LinkType, FieldProvenance] = field(
        default_factory=dict["LinkType", "FieldProvenance"]
    )
    errors: list[str] = field(default_factory=list[str])

    def records(self) -> list[LinkRecord]:
        return [
            LinkRecord(type=link_type, url=url, provenance=self.provenance[link_type])
            for link_type, url in self.links.items()
        ]
