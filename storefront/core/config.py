"""Environment-driven configuration objects for the storefront client."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from storefront.core.exceptions import ConfigurationException

DEFAULT_API_URL = "http://localhost:8082/api/v1"
DEFAULT_SESSION_TTL = 7 * 24 * 60 * 60


@dataclass(slots=True)
class TelegramConfig:
    enabled: bool
    bot_token: str
    chat_id: int | None


@dataclass(slots=True)
class Settings:
    api_url: str
    request_timeout: float | None
    redis_url: str | None
    session_id: str
    session_ttl: int
    telegram: TelegramConfig
    sentry_dsn: str | None
    environment: str
    log_level: str


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return 30.0
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"STOREFRONT_REQUEST_TIMEOUT is not a number: {raw!r}") from exc
    # 0 disables the client-side timeout entirely
    return value if value > 0 else None


def _parse_chat_id(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"TELEGRAM_NOTIFY_CHAT_ID is not an integer: {raw!r}") from exc


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    api_url = os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL).strip().rstrip("/")
    if not api_url.startswith(("http://", "https://")):
        raise ConfigurationException(f"STOREFRONT_API_URL must be an http(s) URL, got {api_url!r}")

    try:
        session_ttl = int(os.getenv("STOREFRONT_SESSION_TTL", str(DEFAULT_SESSION_TTL)))
    except ValueError as exc:
        raise ConfigurationException("STOREFRONT_SESSION_TTL must be an integer") from exc

    bot_token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    chat_id = _parse_chat_id(os.getenv("TELEGRAM_NOTIFY_CHAT_ID"))
    telegram = TelegramConfig(
        enabled=bool(bot_token and chat_id is not None),
        bot_token=bot_token,
        chat_id=chat_id,
    )

    return Settings(
        api_url=api_url,
        request_timeout=_parse_timeout(os.getenv("STOREFRONT_REQUEST_TIMEOUT")),
        redis_url=os.getenv("REDIS_URL") or None,
        session_id=os.getenv("STOREFRONT_SESSION_ID", "default"),
        session_ttl=session_ttl,
        telegram=telegram,
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
