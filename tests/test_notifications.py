from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront.core.notifications import (
    FanoutNotifier,
    LoggingNotifier,
    MemoryNotifier,
    Severity,
    TelegramNotifier,
)


def _bot() -> MagicMock:
    bot = MagicMock()
    bot.send_message = AsyncMock()
    bot.session.close = AsyncMock()
    return bot


@pytest.mark.asyncio
async def test_memory_notifier_records_in_order():
    notifier = MemoryNotifier()

    await notifier.notify("Order placed successfully", Severity.SUCCESS)
    await notifier.notify("Address cannot be empty", Severity.WARNING, 3000)

    assert notifier.messages() == ["Order placed successfully", "Address cannot be empty"]
    assert notifier.messages(Severity.WARNING) == ["Address cannot be empty"]
    assert notifier.last.duration_ms == 3000
    assert notifier.last.to_dict()["severity"] == "warning"

    notifier.clear()
    assert notifier.last is None


@pytest.mark.asyncio
async def test_logging_notifier_maps_severity(caplog):
    notifier = LoggingNotifier()

    with caplog.at_level(logging.INFO, logger="storefront.notify"):
        await notifier.notify("Wallet balance not sufficient to place order", Severity.WARNING)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "Wallet balance not sufficient" in record.getMessage()


@pytest.mark.asyncio
async def test_telegram_notifier_escapes_html():
    bot = _bot()
    notifier = TelegramNotifier(bot, chat_id=42)

    await notifier.notify("Cart <empty> & sad", Severity.ERROR)

    bot.send_message.assert_awaited_once_with(42, "❌ Cart &lt;empty&gt; &amp; sad", parse_mode="HTML")


@pytest.mark.asyncio
async def test_telegram_notifier_respects_min_severity():
    bot = _bot()
    notifier = TelegramNotifier(bot, chat_id=42, min_severity=Severity.WARNING)

    await notifier.notify("Logged in successfully", Severity.SUCCESS)
    await notifier.notify("Please select a shipping address", Severity.WARNING)

    assert bot.send_message.await_count == 1


@pytest.mark.asyncio
async def test_telegram_send_failure_is_swallowed(caplog):
    bot = _bot()
    bot.send_message.side_effect = RuntimeError("telegram down")
    notifier = TelegramNotifier(bot, chat_id=42)

    with caplog.at_level(logging.WARNING):
        await notifier.notify("Order placed successfully", Severity.SUCCESS)

    assert "telegram down" in caplog.text

    await notifier.close()
    bot.session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_fanout_delivers_to_every_sink():
    first, second = MemoryNotifier(), MemoryNotifier()
    fanout = FanoutNotifier([first, second])

    await fanout.notify("hello", Severity.INFO)

    assert first.messages() == ["hello"]
    assert second.messages() == ["hello"]
