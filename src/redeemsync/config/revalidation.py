"""Settings for the downstream cache revalidation hook."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

REVALIDATE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class RevalidationConfig:
    endpoint: str
    secret: str
    resilience: ResilienceConfig


def get_revalidation_config() -> RevalidationConfig | None:
    """Return the hook settings, or ``None`` when the hook is not configured."""

    endpoint = optional_env_var("REVALIDATE_ENDPOINT")
    secret = optional_env_var("REVALIDATE_SECRET")
    if endpoint is None and secret is None:
        return None
    values = require_env_vars(["REVALIDATE_ENDPOINT", "REVALIDATE_SECRET"])
    return RevalidationConfig(
        endpoint=values["REVALIDATE_ENDPOINT"],
        secret=values["REVALIDATE_SECRET"],
        resilience=ResilienceConfig(
            name="revalidate",
            timeout_seconds=REVALIDATE_TIMEOUT_SECONDS,
            retry=RetryPolicy(max_retries=2),
        ),
    )
