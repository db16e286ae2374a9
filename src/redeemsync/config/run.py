"""Everything one pipeline run needs, resolved once before any work starts."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import ResilienceConfig
from .refresh import RefreshConfig, get_refresh_config
from .revalidation import RevalidationConfig, get_revalidation_config
from .sources import get_sources_config


@dataclass(frozen=True, slots=True)
class RunConfig:
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    sources: ResilienceConfig = field(default_factory=lambda: ResilienceConfig(name="sources"))
    revalidation: RevalidationConfig | None = None


def get_run_config(*, refresh: RefreshConfig | None = None) -> RunConfig:
    """Read the refresh, scraping and revalidation settings from the environment.

    Raises ``ConfigurationError`` for any unparsable or half-configured value.
    """

    return RunConfig(
        refresh=refresh or get_refresh_config(),
        sources=get_sources_config(),
        revalidation=get_revalidation_config(),
    )
