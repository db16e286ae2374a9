from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from redeemsync.app import (
    backfill_social_links,
    preview_social_links,
    refresh_codes,
    refresh_expired_codes,
)
from redeemsync.config import (
    ConfigurationError,
    configure_logging,
    get_refresh_config,
    get_run_config,
    get_sources_config,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from redeemsync.config import RefreshConfig, ResilienceConfig, RunConfig
    from redeemsync.domain.refresh import RunStats

log = logging.getLogger(__name__)

PIPELINES: dict[str, Callable[[RunConfig], RunStats]] = {
    "codes": refresh_codes,
    "expired": refresh_expired_codes,
    "links": backfill_social_links,
}


def _add_refresh_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--slug",
        "-s",
        dest="slugs",
        action="append",
        default=[],
        help="Only process the entity with this slug or id (repeatable)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Entities processed in parallel per chunk (defaults to config)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help="Entities read from the store per page (defaults to config)",
    )
    parser.add_argument(
        "--batch-delay-ms",
        type=float,
        help="Pause between chunks in milliseconds (defaults to config)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Scrape and reconcile but do not write to the store",
    )
    parser.add_argument(
        "--summary-path",
        type=Path,
        help="Write a JSON run summary to this file",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep redeemable codes in sync with their sources")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    codes = subparsers.add_parser("codes", help="Refresh active codes from source pages")
    _add_refresh_arguments(codes)

    expired = subparsers.add_parser("expired", help="Track expired codes and drop expired rows")
    _add_refresh_arguments(expired)

    links = subparsers.add_parser("links", help="Backfill missing social links")
    _add_refresh_arguments(links)

    preview = subparsers.add_parser(
        "links-preview", help="Show the social links found on the given pages"
    )
    preview.add_argument("urls", nargs="+", metavar="URL", help="Source page to scrape")

    return parser.parse_args(list(argv))


def _dedupe(values: Sequence[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        cleaned = value.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


def _build_refresh_config(args: argparse.Namespace) -> RefreshConfig:
    config = get_refresh_config()
    overrides: dict[str, object] = {"only": _dedupe([*config.only, *args.slugs])}
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.batch_delay_ms is not None:
        overrides["batch_delay_seconds"] = args.batch_delay_ms / 1000
    if args.dry_run:
        overrides["dry_run"] = True
    if args.summary_path is not None:
        overrides["summary_path"] = args.summary_path
    return replace(config, **overrides)  # pyright: ignore[reportArgumentType]


def _print_preview(urls: Sequence[str], sources: ResilienceConfig) -> None:
    extraction = preview_social_links(urls, sources=sources)
    if not extraction.links:
        log.info("No social links found")
    for record in extraction.records():
        log.info(
            "%s: %s (%s, %s)",
            record.type,
            record.url,
            record.provenance.provider,
            record.provenance.source_url,
        )
    for message in extraction.errors:
        log.warning("Source error: %s", message)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        if parsed_args.command in PIPELINES:
            config = get_run_config(refresh=_build_refresh_config(parsed_args))
            sources = config.sources
        else:
            config = None
            sources = get_sources_config()
    except (ConfigurationError, ValueError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if config is None:
            _print_preview(parsed_args.urls, sources)
            return
        stats = PIPELINES[parsed_args.command](config)
    except Exception:
        log.exception("Fatal error during %s run", parsed_args.command)
        sys.exit(1)

    if stats.exit_code:
        log.error("%d entities failed", stats.failed)
        sys.exit(stats.exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
