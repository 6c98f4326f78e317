"""Backend API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

API_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Holds the record service location and credentials."""

    base_url: str
    access_token: str
    resilience: ResilienceConfig


def get_api_config(*, resilience: ResilienceConfig | None = None) -> ApiConfig:
    values = require_env_vars(("ANESTHESIA_API_BASE_URL", "ANESTHESIA_API_TOKEN"))
    base_url = values["ANESTHESIA_API_BASE_URL"].rstrip("/")
    access_token = values["ANESTHESIA_API_TOKEN"].strip()
    timeout = optional_float_env_var("ANESTHESIA_API_TIMEOUT", API_TIMEOUT_SECONDS)

    return ApiConfig(
        base_url=base_url,
        access_token=access_token,
        resilience=resilience
        or ResilienceConfig(
            name="anesthesia-api",
            base_url=base_url,
            timeout_seconds=timeout,
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        ),
    )
