"""Application configuration helpers."""

from __future__ import annotations

from anesthesia_reports.common.logging import configure_logging

from .api import ApiConfig, get_api_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

__all__ = [
    "ApiConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_api_config",
    "require_env_var",
    "require_env_vars",
]
