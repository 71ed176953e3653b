"""Application bootstrap wiring client, session store, notifier and use cases."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from aiogram import Bot

from storefront.application.address_book import AddressBook
from storefront.application.auth import AuthFlow
from storefront.application.checkout import CheckoutOrchestrator
from storefront.application.checkout_page import CheckoutPage
from storefront.core.config import Settings
from storefront.core.navigation import MemoryNavigator, Navigator
from storefront.core.notifications import (
    FanoutNotifier,
    LoggingNotifier,
    NotificationSink,
    TelegramNotifier,
)
from storefront.core.sentry_integration import init_sentry
from storefront.domain.address_selection import AddressSelector
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import RedisSessionStore, SessionStore
from storefront.logging_config import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class Storefront:
    settings: Settings
    client: StorefrontApiClient
    session_store: SessionStore
    notifier: NotificationSink
    navigator: Navigator
    selector: AddressSelector
    checkout: CheckoutOrchestrator
    page: CheckoutPage
    addresses: AddressBook
    auth: AuthFlow
    telegram: TelegramNotifier | None = None

    async def aclose(self) -> None:
        await self.client.close()
        if self.telegram is not None:
            await self.telegram.close()


def build_notifier(settings: Settings) -> tuple[NotificationSink, TelegramNotifier | None]:
    """Logging always; Telegram on top when a bot token and chat id are set."""
    sinks: list[NotificationSink] = [LoggingNotifier()]
    telegram = None
    if settings.telegram.enabled and settings.telegram.chat_id is not None:
        telegram = TelegramNotifier(Bot(token=settings.telegram.bot_token), settings.telegram.chat_id)
        sinks.append(telegram)
        logger.info("Telegram notifications enabled for chat %s", settings.telegram.chat_id)
    return FanoutNotifier(sinks), telegram


def build_storefront(
    settings: Settings,
    *,
    session_store: SessionStore | None = None,
    navigator: Navigator | None = None,
) -> Storefront:
    """Create storefront runtime components from configuration."""
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, settings.environment)

    client = StorefrontApiClient(settings.api_url, timeout=settings.request_timeout)
    if session_store is None:
        session_store = RedisSessionStore(
            settings.redis_url,
            session_id=settings.session_id,
            ttl_seconds=settings.session_ttl,
        )
    navigator = navigator or MemoryNavigator()
    notifier, telegram = build_notifier(settings)
    selector = AddressSelector()

    return Storefront(
        settings=settings,
        client=client,
        session_store=session_store,
        notifier=notifier,
        navigator=navigator,
        selector=selector,
        checkout=CheckoutOrchestrator(client, session_store, notifier, navigator),
        page=CheckoutPage(client, session_store, notifier, selector),
        addresses=AddressBook(client, session_store, notifier, selector),
        auth=AuthFlow(client, session_store, notifier, navigator, selector),
        telegram=telegram,
    )
