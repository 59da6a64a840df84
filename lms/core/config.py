from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    # Centralize env access so type casting stays in load_settings()
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: str = "false") -> bool:
    raw = _getenv(name, default).lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    paystack_secret_key: str | None = None
    paystack_base_url: str = "https://api.paystack.co"
    paystack_currency: str = "USD"
    paystack_timeout_seconds: float = 10.0
    paystack_callback_url: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    timeout_raw = _getenv("PAYSTACK_TIMEOUT_SECONDS", "10")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        paystack_timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"PAYSTACK_TIMEOUT_SECONDS must be a number (got {timeout_raw!r})"
        ) from None
    if paystack_timeout <= 0:
        raise ValueError(
            f"PAYSTACK_TIMEOUT_SECONDS must be positive (got {timeout_raw!r})"
        )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON"),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        paystack_secret_key=_getenv("PAYSTACK_SECRET_KEY", "") or None,
        paystack_base_url=_getenv("PAYSTACK_BASE_URL", "https://api.paystack.co"),
        paystack_currency=_getenv("PAYSTACK_CURRENCY", "USD").upper(),
        paystack_timeout_seconds=paystack_timeout,
        paystack_callback_url=_getenv("PAYSTACK_CALLBACK_URL", "") or None,
    )


# Module-level singleton so imports are cheap
SETTINGS = load_settings()
