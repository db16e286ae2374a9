"""Application configuration helpers."""

from __future__ import annotations

from redeemsync.common.logging import configure_logging

from .env import (
    env_bool,
    env_float,
    env_int,
    env_list,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .refresh import RefreshConfig, get_refresh_config
from .revalidation import RevalidationConfig, get_revalidation_config
from .run import RunConfig, get_run_config
from .sources import get_sources_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RefreshConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "RevalidationConfig",
    "RunConfig",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "get_database_config",
    "get_refresh_config",
    "get_revalidation_config",
    "get_run_config",
    "get_sources_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
