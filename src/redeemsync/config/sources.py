"""Resilience settings for scraping third-party code pages."""

from __future__ import annotations

from .env import env_float, env_int
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

SOURCE_USER_AGENT = "Mozilla/5.0 (compatible; RedeemSyncBot/1.0)"
DEFAULT_FETCH_TIMEOUT_SECONDS = 15.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_PACING_MS = 250.0


def get_sources_config() -> ResilienceConfig:
    pacing_ms = env_float("FETCH_PACING_MS", DEFAULT_FETCH_PACING_MS)
    return ResilienceConfig(
        name="sources",
        timeout_seconds=env_float("FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT_SECONDS),
        pacing_delay_seconds=pacing_ms / 1000,
        retry=RetryPolicy(
            max_retries=env_int("FETCH_MAX_RETRIES", DEFAULT_FETCH_MAX_RETRIES, minimum=0),
        ),
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        default_headers={"User-Agent": SOURCE_USER_AGENT},
    )
