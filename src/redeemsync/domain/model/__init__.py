"""Domain model for the code and metadata reconciliation pipeline."""

from __future__ import annotations

from .entities import (
    MAX_SOURCE_URLS,
    CodeRecord,
    ExtractionResult,
    FieldProvenance,
    LinkRecord,
    PersistedCodeRow,
    SocialLinkExtraction,
    TrackedEntity,
)
from .enums import (
    MUTABLE_STATUSES,
    TERMINAL_STATUSES,
    CodeStatus,
    LinkType,
    OutcomeStatus,
    Provider,
)

__all__ = [
    "MAX_SOURCE_URLS",
    "MUTABLE_STATUSES",
    "TERMINAL_STATUSES",
    "CodeRecord",
    "CodeStatus",
    "ExtractionResult",
    "FieldProvenance",
    "LinkRecord",
    "LinkType",
    "OutcomeStatus",
    "PersistedCodeRow",
    "Provider",
    "SocialLinkExtraction",
    "TrackedEntity",
]
