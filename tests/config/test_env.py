from __future__ import annotations

import pytest

from sitestock.config import (
    ConfigurationError,
    MissingConfigurationError,
    backend_configured,
    get_backend_config,
    get_import_settings,
    optional_env,
    require_env_vars,
)
from sitestock.domain.model import DEFAULT_CURRENCY
from sitestock.domain.reconciliation.records import DEFAULT_MAX_IMPORT_ROWS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")
    assert optional_env("EXAMPLE_VAR") is None

    monkeypatch.setenv("EXAMPLE_VAR", " value ")
    assert optional_env("EXAMPLE_VAR") == "value"


def test_backend_config_normalises_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITESTOCK_API_URL", " https://inventory.example.com/api// ")
    monkeypatch.setenv("SITESTOCK_API_TOKEN", "token")

    config = get_backend_config()

    assert backend_configured()
    assert config.base_url == "https://inventory.example.com/api/"
    assert config.token == "token"
    assert config.resilience.base_url == config.base_url
    assert config.resilience.ratelimit is not None
    assert "POST" not in config.resilience.retry.allowed_methods


def test_backend_config_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SITESTOCK_API_URL", raising=False)

    assert not backend_configured()
    with pytest.raises(MissingConfigurationError, match="SITESTOCK_API_URL"):
        get_backend_config()


def test_import_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SITESTOCK_MAX_IMPORT_ROWS", raising=False)
    monkeypatch.delenv("SITESTOCK_DEFAULT_CURRENCY", raising=False)

    settings = get_import_settings()

    assert settings.max_rows == DEFAULT_MAX_IMPORT_ROWS
    assert settings.default_currency == DEFAULT_CURRENCY


def test_import_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITESTOCK_MAX_IMPORT_ROWS", "250")
    monkeypatch.setenv("SITESTOCK_DEFAULT_CURRENCY", "$")

    settings = get_import_settings()

    assert settings.max_rows == 250
    assert settings.default_currency == "$"


@pytest.mark.parametrize("raw", ["many", "0", "-3"])
def test_import_row_limit_must_be_a_positive_integer(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
) -> None:
    monkeypatch.setenv("SITESTOCK_MAX_IMPORT_ROWS", raw)

    with pytest.raises(ConfigurationError, match="SITESTOCK_MAX_IMPORT_ROWS"):
        get_import_settings()
