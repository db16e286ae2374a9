"""Per-entity outcomes and the aggregate counters of one run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from redeemsync.domain.model import OutcomeStatus

if TYPE_CHECKING:
    from redeemsync.domain.model import LinkType, TrackedEntity

MAX_ERROR_LENGTH = 200


def truncate_message(message: str, limit: int = MAX_ERROR_LENGTH) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - 3] + "..."


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityOutcome:
    entity_id: str
    slug: str
    name: str
    status: OutcomeStatus
    found: int = 0
    upserted: int = 0
    removed: int = 0
    new_codes: int = 0
    expired: int = 0
    links_updated: tuple[LinkType, ...] = ()
    changed: bool = False
    reason: str | None = None
    error: str | None = None
    warnings: tuple[str, ...] = ()

    @classmethod
    def ok(cls, entity: TrackedEntity, **counts: object) -> EntityOutcome:
        return cls(
            entity_id=entity.id,
            slug=entity.slug,
            name=entity.name,
            status=OutcomeStatus.OK,
            **counts,  # pyright: ignore[reportArgumentType]
        )

    @classmethod
    def skipped(
        cls, entity: TrackedEntity, reason: str, *, warnings: tuple[str, ...] = ()
    ) -> EntityOutcome:
        return cls(
            entity_id=entity.id,
            slug=entity.slug,
            name=entity.name,
            status=OutcomeStatus.SKIPPED,
            reason=reason,
            warnings=warnings,
        )

    @classmethod
    def failed(cls, entity: TrackedEntity, error: BaseException | str) -> EntityOutcome:
        message = str(error) or type(error).__name__
        return cls(
            entity_id=entity.id,
            slug=entity.slug,
            name=entity.name,
            status=OutcomeStatus.FAILED,
            error=truncate_message(message),
        )


@dataclass(slots=True)
class RunStats:
    """Counters plus the outcome lists the automation summary is built from."""

    kind: str
    dry_run: bool = False
    processed: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    records_found: int = 0
    upserted: int = 0
    removed: int = 0
    new_codes: int = 0
    expired_tracked: int = 0
    links_updated: int = 0
    links_by_type: Counter[LinkType] = field(default_factory=Counter["LinkType"])
    successes: list[EntityOutcome] = field(default_factory=list[EntityOutcome])
    skips: list[EntityOutcome] = field(default_factory=list[EntityOutcome])
    failures: list[EntityOutcome] = field(default_factory=list[EntityOutcome])

    def record(self, outcome: EntityOutcome) -> None:
        self.processed += 1
        if outcome.status is OutcomeStatus.OK:
            self.succeeded += 1
            self.records_found += outcome.found
            self.upserted += outcome.upserted
            self.removed += outcome.removed
            self.new_codes += outcome.new_codes
            self.expired_tracked += outcome.expired
            self.links_updated += len(outcome.links_updated)
            self.links_by_type.update(outcome.links_updated)
            self.successes.append(outcome)
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
            self.skips.append(outcome)
        else:
            self.failed += 1
            self.failures.append(outcome)

    @property
    def changed_successes(self) -> list[EntityOutcome]:
        return [outcome for outcome in self.successes if outcome.changed]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed > 0 else 0

    def counters(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "recordsFound": self.records_found,
            "upserted": self.upserted,
            "removed": self.removed,
            "newCodes": self.new_codes,
            "expiredTracked": self.expired_tracked,
            "linksUpdated": self.links_updated,
        }

    def summary_lines(self) -> list[str]:
        lines = [
            f"Processed: {self.processed}",
            f"Succeeded: {self.succeeded}",
            f"Skipped:   {self.skipped}",
            f"Failed:    {self.failed}",
        ]
        if self.records_found or self.upserted or self.removed:
            lines += [
                f"Codes found:    {self.records_found}",
                f"Codes upserted: {self.upserted}",
                f"Codes removed:  {self.removed}",
                f"New codes:      {self.new_codes}",
            ]
        if self.expired_tracked:
            lines.append(f"Expired codes tracked: {self.expired_tracked}")
        for link_type, count in sorted(self.links_by_type.items()):
            lines.append(f"Links updated ({link_type}): {count}")
        if self.dry_run:
            lines.append("Dry run: no changes were written")
        return lines
