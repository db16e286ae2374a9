from __future__ import annotations

from redeemsync.domain.model import FieldProvenance, LinkType, Provider, SocialLinkExtraction
from redeemsync.domain.reconciliation import ALL_LINKS_PRESENT, NO_NEW_LINKS, plan_link_updates
from tests.helpers.fakes import make_entity

ALL_LINKS = {link_type: f"https://example.com/{link_type}" for link_type in LinkType}


def _extraction(links: dict[LinkType, str]) -> SocialLinkExtraction:
    provenance = FieldProvenance(Provider.BEEBOM, "https://beebom.com/game-codes")
    return SocialLinkExtraction(
        links=links,
        provenance={link_type: provenance for link_type in links},
    )


def test_only_missing_links_are_filled() -> None:
    entity = make_entity(links={LinkType.ROBLOX: "https://www.roblox.com/games/1/existing"})
    extraction = _extraction(
        {
            LinkType.ROBLOX: "https://www.roblox.com/games/2/other",
            LinkType.DISCORD: "https://discord.gg/game",
        }
    )

    plan = plan_link_updates(entity, extraction)

    assert plan.updates == {LinkType.DISCORD: "https://discord.gg/game"}
    assert [record.type for record in plan.applied] == [LinkType.DISCORD]
    assert plan.reason is None
    assert plan.has_changes


def test_complete_entity_is_skipped() -> None:
    plan = plan_link_updates(make_entity(links=ALL_LINKS), _extraction({}))

    assert plan.reason == ALL_LINKS_PRESENT
    assert not plan.has_changes


def test_no_usable_candidates() -> None:
    entity = make_entity(links={LinkType.DISCORD: "https://discord.gg/game"})

    plan = plan_link_updates(entity, _extraction({LinkType.DISCORD: "https://discord.gg/other"}))

    assert plan.reason == NO_NEW_LINKS
    assert plan.updates == {}
