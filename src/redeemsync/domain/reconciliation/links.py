"""Fill an entity's missing social links from scraped candidates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redeemsync.domain.model import (
        LinkRecord,
        LinkType,
        SocialLinkExtraction,
        TrackedEntity,
    )

ALL_LINKS_PRESENT = "all links present"
NO_NEW_LINKS = "no new links found"


@dataclass(frozen=True, slots=True)
class LinkUpdatePlan:
    updates: dict[LinkType, str] = field(default_factory=dict["LinkType", str])
    applied: tuple[LinkRecord, ...] = ()
    reason: str | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.updates)


def plan_link_updates(entity: TrackedEntity, extraction: SocialLinkExtraction) -> LinkUpdatePlan:
    """Pick scraped links for the link types ``entity`` lacks. Existing links are kept."""

    missing = entity.missing_link_types
    if not missing:
        return LinkUpdatePlan(reason=ALL_LINKS_PRESENT)

    applied = [record for record in extraction.records() if record.type in missing]
    if not applied:
        return LinkUpdatePlan(reason=NO_NEW_LINKS)
    return LinkUpdatePlan(
        updates={record.type: record.url for record in applied},
        applied=tuple(applied),
    )
