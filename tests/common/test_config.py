from __future__ import annotations

import pytest

from anesthesia_reports.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_api_config,
    require_env_var,
    require_env_vars,
)
from anesthesia_reports.config.env import optional_float_env_var
from anesthesia_reports.config.http_resilience import IDEMPOTENT_METHODS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.delenv("OTHER_MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["OTHER_MISSING_VAR", "MISSING_VAR"])

    assert "MISSING_VAR, OTHER_MISSING_VAR" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_float_env_var(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_TIMEOUT", raising=False)
    assert optional_float_env_var("EXAMPLE_TIMEOUT", 5.0) == 5.0

    monkeypatch.setenv("EXAMPLE_TIMEOUT", "2.5")
    assert optional_float_env_var("EXAMPLE_TIMEOUT", 5.0) == 2.5

    monkeypatch.setenv("EXAMPLE_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError, match="EXAMPLE_TIMEOUT"):
        optional_float_env_var("EXAMPLE_TIMEOUT", 5.0)


def test_get_api_config_builds_authenticated_resilience(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANESTHESIA_API_BASE_URL", "https://api.example.org/v1/")
    monkeypatch.setenv("ANESTHESIA_API_TOKEN", " secret ")
    monkeypatch.setenv("ANESTHESIA_API_TIMEOUT", "7")

    config = get_api_config()

    assert config.base_url == "https://api.example.org/v1"
    assert config.access_token == "secret"
    assert config.resilience.base_url == config.base_url
    assert config.resilience.timeout_seconds == 7.0
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer secret"
    assert "POST" not in config.resilience.retry.allowed_methods
    assert config.resilience.retry.allowed_methods == IDEMPOTENT_METHODS


def test_get_api_config_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANESTHESIA_API_BASE_URL", "https://api.example.org")
    monkeypatch.delenv("ANESTHESIA_API_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="ANESTHESIA_API_TOKEN"):
        get_api_config()
