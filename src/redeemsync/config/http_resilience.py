"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff and additive jitter.

    The wait before retry ``n`` (zero based) is
    ``min(base_backoff_seconds * 2**n, max_backoff_wait) + uniform(0, jitter_seconds)``.
    Total attempts never exceed ``max_retries + 1``.
    """

    max_retries: int = 2
    base_backoff_seconds: float = 0.5
    jitter_seconds: float = 0.25
    max_backoff_wait: float = 60.0
    retry_statuses: frozenset[int] = field(default_factory=lambda: frozenset({429}))
    retry_status_floor: int = 500

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_backoff_seconds < 0 or self.jitter_seconds < 0:
            raise ValueError("backoff and jitter must be non-negative")

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retry_statuses or status_code >= self.retry_status_floor


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    pacing_delay_seconds: float = 0.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
