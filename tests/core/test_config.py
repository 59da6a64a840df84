from __future__ import annotations

import pytest

from lms.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
        "PORT",
        "DATABASE_URL",
        "PAYSTACK_SECRET_KEY",
        "PAYSTACK_CURRENCY",
        "PAYSTACK_TIMEOUT_SECONDS",
        "PAYSTACK_CALLBACK_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.paystack_secret_key is None
    assert settings.paystack_currency == "USD"
    assert settings.paystack_timeout_seconds == 10.0
    assert settings.paystack_callback_url is None


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://lms@db/lms")
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_live_x")
    monkeypatch.setenv("PAYSTACK_CURRENCY", "ngn")
    monkeypatch.setenv("PAYSTACK_TIMEOUT_SECONDS", "2.5")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.database_url == "postgresql+asyncpg://lms@db/lms"
    assert settings.paystack_secret_key == "sk_live_x"
    assert settings.paystack_currency == "NGN"
    assert settings.paystack_timeout_seconds == 2.5


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("LOG_LEVEL", "  warning  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


def test_empty_database_url_means_in_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    assert load_settings().database_url is None


# ---- invalid APP_ENV ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("LOG_LEVEL", "info")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_empty_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


# ---- invalid LOG_LEVEL ----


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


# ---- numeric / boolean fields ----


def test_load_settings_rejects_non_integer_port(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


def test_load_settings_rejects_bad_log_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "sometimes")
    with pytest.raises(ValueError, match="LOG_JSON must be a boolean"):
        load_settings()


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_load_settings_rejects_bad_paystack_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("PAYSTACK_TIMEOUT_SECONDS", raw)
    with pytest.raises(ValueError, match="PAYSTACK_TIMEOUT_SECONDS"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
    )


def test_settings_is_dev() -> None:
    s = _make_settings("dev")
    assert s.is_dev is True
    assert s.is_test is False
    assert s.is_prod is False


def test_settings_is_prod() -> None:
    s = _make_settings("prod")
    assert s.is_dev is False
    assert s.is_test is False
    assert s.is_prod is True


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
