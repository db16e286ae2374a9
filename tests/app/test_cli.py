from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from redeemsync.domain.model import FieldProvenance, LinkType, Provider, SocialLinkExtraction
from redeemsync.domain.refresh import EntityOutcome, RunStats
from redeemsync.ui import cli
from tests.helpers.fakes import make_entity

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from redeemsync.config import ResilienceConfig, RunConfig


def _capture(
    monkeypatch: pytest.MonkeyPatch,
    command: str,
    *,
    stats: RunStats | None = None,
) -> list[RunConfig]:
    captured: list[RunConfig] = []

    def fake_pipeline(config: RunConfig) -> RunStats:
        captured.append(config)
        return stats or RunStats(kind=command)

    monkeypatch.setitem(cli.PIPELINES, command, fake_pipeline)
    return captured


def test_cli_defaults_come_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch, "codes")

    cli.main(["codes"])

    (config,) = captured
    assert config.refresh.concurrency == 5
    assert config.refresh.page_size == 500
    assert config.refresh.only == ()
    assert config.refresh.dry_run is False
    assert config.sources.pacing_delay_seconds == pytest.approx(0.25)
    assert config.revalidation is None


def test_cli_flags_override_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REFRESH_ONLY_SLUGS", "alpha,beta")
    captured = _capture(monkeypatch, "expired")

    cli.main(
        [
            "expired",
            "--slug",
            "beta",
            "-s",
            "gamma",
            "--concurrency",
            "2",
            "--page-size",
            "10",
            "--batch-delay-ms",
            "250",
            "--dry-run",
            "--summary-path",
            "out/summary.json",
        ]
    )

    (config,) = captured
    refresh = config.refresh
    assert refresh.only == ("alpha", "beta", "gamma")
    assert refresh.concurrency == 2
    assert refresh.page_size == 10
    assert refresh.batch_delay_seconds == pytest.approx(0.25)
    assert refresh.dry_run is True
    assert refresh.summary_path == Path("out/summary.json")


def test_cli_invalid_values_exit_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, "links")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["links", "--concurrency", "0"])

    assert excinfo.value.code == 2


def test_cli_bad_environment_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REFRESH_PAGE_SIZE", "lots")
    _capture(monkeypatch, "codes")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["codes"])

    assert excinfo.value.code == 2


def test_cli_exits_one_when_an_entity_failed(monkeypatch: pytest.MonkeyPatch) -> None:
    stats = RunStats(kind="refresh-codes")
    stats.record(EntityOutcome.failed(make_entity(), "boom"))
    _capture(monkeypatch, "codes", stats=stats)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["codes"])

    assert excinfo.value.code == 1


def test_cli_exits_one_on_fatal_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def exploding(_config: RunConfig) -> RunStats:
        raise RuntimeError("database unavailable")

    monkeypatch.setitem(cli.PIPELINES, "codes", exploding)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["codes"])

    assert excinfo.value.code == 1


def test_cli_links_preview(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    requested: list[Sequence[str]] = []
    provenance = FieldProvenance(Provider.BEEBOM, "https://beebom.com/codes")

    def fake_preview(urls: Sequence[str], *, sources: ResilienceConfig) -> SocialLinkExtraction:
        requested.append(urls)
        assert sources.name == "sources"
        return SocialLinkExtraction(
            links={LinkType.DISCORD: "https://discord.gg/game"},
            provenance={LinkType.DISCORD: provenance},
        )

    preview: Callable[..., SocialLinkExtraction] = fake_preview
    monkeypatch.setattr(cli, "preview_social_links", preview)

    with caplog.at_level("INFO"):
        cli.main(["links-preview", "https://beebom.com/codes"])

    assert requested == [["https://beebom.com/codes"]]
    assert "https://discord.gg/game" in caplog.text


@pytest.mark.parametrize(
    ("name", "value"),
    [("REVALIDATE_ENDPOINT", "https://example.com/api/revalidate"), ("FETCH_PACING_MS", "soon")],
)
def test_cli_bad_run_settings_exit_with_two_before_running(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)
    captured = _capture(monkeypatch, "codes")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["codes"])

    assert excinfo.value.code == 2
    assert captured == []
