"""
Sentry integration for error tracking.

Initialized once at bootstrap when SENTRY_DSN is configured. Until then the
capture helpers are no-ops because the SDK has no client bound.
"""
from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    traces_sample_rate: float = 0.1,
) -> bool:
    """Initialize Sentry SDK for error tracking.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    if not dsn:
        logger.info("Sentry DSN not configured, skipping initialization")
        return False

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            traces_sample_rate=traces_sample_rate,
            integrations=[
                AioHttpIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            ],
            # Session tokens travel in headers; never ship them
            send_default_pii=False,
        )
    except Exception as e:
        logger.error("Failed to initialize Sentry: %s", e)
        return False

    logger.info("Sentry initialized for environment: %s", environment)
    return True


def capture_exception(error: BaseException, **extra: Any) -> None:
    """Capture an exception and send to Sentry."""
    with sentry_sdk.new_scope() as scope:
        for key, value in extra.items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)


def set_user(username: str | None) -> None:
    """Set user context for Sentry events."""
    sentry_sdk.set_user({"username": username} if username else None)
