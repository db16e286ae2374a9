"""SQLAlchemy adapter package for redeemsync."""

from __future__ import annotations

from .mappings import LINK_COLUMNS, code_table, metadata, tracked_entity_table
from .repositories import SqlAlchemyCodeRepository, SqlAlchemyEntityRepository
from .store import PersistenceError, SqlAlchemyCodeStore
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "LINK_COLUMNS",
    "PersistenceError",
    "SqlAlchemyCodeRepository",
    "SqlAlchemyCodeStore",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "code_table",
    "configured_engine",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
    "tracked_entity_table",
]
