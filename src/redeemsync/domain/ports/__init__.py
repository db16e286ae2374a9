"""Domain port definitions for adapters."""

from __future__ import annotations

from .extraction import CodeExtractor, SocialLinkExtractor
from .notification import ContentChangedNotifier
from .persistence import CodeRepository, CodeStore, EntityRepository
from .unit_of_work import (
    CodeRepositories,
    CodeUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CodeExtractor",
    "CodeRepositories",
    "CodeRepository",
    "CodeStore",
    "CodeUnitOfWork",
    "ContentChangedNotifier",
    "EntityRepository",
    "RepositoryCollection",
    "SocialLinkExtractor",
    "UnitOfWork",
]
