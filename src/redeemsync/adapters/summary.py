"""Machine-readable run summary consumed by automation dashboards."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from redeemsync.domain.model import OutcomeStatus

if TYPE_CHECKING:
    from pathlib import Path

    from redeemsync.domain.refresh import EntityOutcome, RunStats

log = getLogger(__name__)


class SummaryModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class OutcomeSummary(SummaryModel):
    slug: str
    name: str
    status: OutcomeStatus
    found: int | None = None
    upserted: int | None = None
    removed: int | None = None
    new_codes: int | None = None
    expired: int | None = None
    links_updated: list[str] | None = None
    reason: str | None = None
    error: str | None = None
    warnings: list[str] | None = None

    @classmethod
    def from_outcome(cls, outcome: EntityOutcome) -> OutcomeSummary:
        if outcome.status is not OutcomeStatus.OK:
            return cls(
                slug=outcome.slug,
                name=outcome.name,
                status=outcome.status,
                reason=outcome.reason,
                error=outcome.error,
                warnings=list(outcome.warnings) or None,
            )
        return cls(
            slug=outcome.slug,
            name=outcome.name,
            status=outcome.status,
            found=outcome.found,
            upserted=outcome.upserted,
            removed=outcome.removed,
            new_codes=outcome.new_codes,
            expired=outcome.expired,
            links_updated=[str(link_type) for link_type in outcome.links_updated] or None,
            warnings=list(outcome.warnings) or None,
        )


class RunSummary(SummaryModel):
    type: str
    generated_at: datetime
    dry_run: bool = False
    stats: dict[str, int]
    successes: list[OutcomeSummary] = Field(default_factory=list[OutcomeSummary])
    skipped: list[OutcomeSummary] = Field(default_factory=list[OutcomeSummary])
    failures: list[OutcomeSummary] = Field(default_factory=list[OutcomeSummary])

    @classmethod
    def from_stats(cls, stats: RunStats, *, generated_at: datetime | None = None) -> RunSummary:
        return cls(
            type=stats.kind,
            generated_at=generated_at or datetime.now(UTC),
            dry_run=stats.dry_run,
            stats=stats.counters(),
            successes=[OutcomeSummary.from_outcome(item) for item in stats.changed_successes],
            skipped=[OutcomeSummary.from_outcome(item) for item in stats.skips],
            failures=[OutcomeSummary.from_outcome(item) for item in stats.failures],
        )


def write_summary(path: Path, stats: RunStats, *, generated_at: datetime | None = None) -> bool:
    """Write the summary as JSON; return whether the file was written.

    A summary that cannot be written is logged and does not change the run's
    outcome.
    """

    summary = RunSummary.from_stats(stats, generated_at=generated_at)
    payload = summary.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError:
        log.exception("Failed to write automation summary to %s", path)
        return False
    log.info("Wrote automation summary to %s", path)
    return True
