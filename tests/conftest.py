from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from redeemsync.adapters.sqlalchemy import SqlAlchemyCodeStore, shutdown, startup
from redeemsync.adapters.sqlalchemy.migrations import upgrade_head

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

_ENV_VARS = (
    "REFRESH_CONCURRENCY",
    "REFRESH_PAGE_SIZE",
    "REFRESH_BATCH_DELAY_MS",
    "REFRESH_ONLY_SLUGS",
    "REFRESH_DRY_RUN",
    "AUTOMATION_SUMMARY_PATH",
    "REVALIDATE_ENDPOINT",
    "REVALIDATE_SECRET",
    "FETCH_MAX_RETRIES",
    "FETCH_TIMEOUT_SECONDS",
    "FETCH_PACING_MS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    # A file database so worker threads share the same data.
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'redeemsync.db'}", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyCodeStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyCodeStore()
    finally:
        shutdown()
