"""Batch refresh of tracked entities."""

from __future__ import annotations

from .batch import list_eligible_entities, run_bounded
from .orchestrator import RefreshOrchestrator
from .processors import (
    MISSING_SOURCES,
    NO_SOURCES_CONFIGURED,
    UNSUPPORTED_SOURCES,
    CodeRefreshProcessor,
    EntityProcessor,
    ExpiredCodesProcessor,
    SocialLinkProcessor,
)
from .stats import EntityOutcome, RunStats, truncate_message

__all__ = [
    "MISSING_SOURCES",
    "NO_SOURCES_CONFIGURED",
    "UNSUPPORTED_SOURCES",
    "CodeRefreshProcessor",
    "EntityOutcome",
    "EntityProcessor",
    "ExpiredCodesProcessor",
    "RefreshOrchestrator",
    "RunStats",
    "SocialLinkProcessor",
    "list_eligible_entities",
    "run_bounded",
    "truncate_message",
]
