"""Batch refresh settings shared by every reconciliation pass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import env_bool, env_float, env_int, env_list, optional_env_var

DEFAULT_PAGE_SIZE = 500
DEFAULT_CONCURRENCY = 5
DEFAULT_BATCH_DELAY_MS = 500.0


@dataclass(frozen=True, slots=True)
class RefreshConfig:
    """Knobs for one batch run.

    ``only`` holds entity ids or slugs; an empty tuple means every eligible
    entity is processed.
    """

    concurrency: int = DEFAULT_CONCURRENCY
    page_size: int = DEFAULT_PAGE_SIZE
    batch_delay_seconds: float = DEFAULT_BATCH_DELAY_MS / 1000
    only: tuple[str, ...] = ()
    dry_run: bool = False
    summary_path: Path | None = None

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        if self.batch_delay_seconds < 0:
            raise ValueError("batch_delay_seconds must be non-negative")


def get_refresh_config() -> RefreshConfig:
    summary_path = optional_env_var("AUTOMATION_SUMMARY_PATH")
    return RefreshConfig(
        concurrency=env_int("REFRESH_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1),
        page_size=env_int("REFRESH_PAGE_SIZE", DEFAULT_PAGE_SIZE, minimum=1),
        batch_delay_seconds=env_float("REFRESH_BATCH_DELAY_MS", DEFAULT_BATCH_DELAY_MS) / 1000,
        only=env_list("REFRESH_ONLY_SLUGS"),
        dry_run=env_bool("REFRESH_DRY_RUN"),
        summary_path=Path(summary_path) if summary_path else None,
    )
