"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class CodeStatus(StrEnum):
    ACTIVE = "active"
    CHECK = "check"
    EXPIRED = "expired"


# Statuses eligible for removal when a fresh scrape no longer lists the code.
MUTABLE_STATUSES: Final[frozenset[CodeStatus]] = frozenset({CodeStatus.ACTIVE, CodeStatus.CHECK})
TERMINAL_STATUSES: Final[frozenset[CodeStatus]] = frozenset({CodeStatus.EXPIRED})


class Provider(StrEnum):
    ROBLOXDEN = "robloxden"
    BEEBOM = "beebom"
    DESTRUCTOID = "destructoid"


class LinkType(StrEnum):
    """Social link slots tracked per entity."""

    ROBLOX = "roblox"
    COMMUNITY = "community"
    DISCORD = "discord"
    TWITTER = "twitter"
    YOUTUBE = "youtube"


class OutcomeStatus(StrEnum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "error"
