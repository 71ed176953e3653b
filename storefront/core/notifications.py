"""
User-facing notification sinks.

Supports:
- Logging sink (default, always on)
- In-memory sink that records notifications (tests, headless runs)
- Telegram push notifications through an aiogram Bot
- Fan-out to several sinks at once
"""
from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from aiogram import Bot

logger = logging.getLogger(__name__)

# Validation warnings auto-hide after this long
WARNING_DURATION_MS = 3000


class Severity(str, Enum):
    """Notification severity (snackbar variant)."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}

_TELEGRAM_PREFIX = {
    Severity.INFO: "ℹ️",
    Severity.SUCCESS: "✅",
    Severity.WARNING: "⚠️",
    Severity.ERROR: "❌",
}


@dataclass
class Notification:
    """Notification payload."""

    message: str
    severity: Severity
    duration_ms: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "duration_ms": self.duration_ms,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink(ABC):
    """Surfaces human-readable messages to the user."""

    @abstractmethod
    async def notify(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> None:
        """Show a message with the given severity."""
        pass


class LoggingNotifier(NotificationSink):
    """Writes notifications to the log."""

    def __init__(self, name: str = "storefront.notify") -> None:
        self._logger = logging.getLogger(name)

    async def notify(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> None:
        self._logger.log(_LOG_LEVELS[Severity(severity)], "[%s] %s", Severity(severity).value, message)


class MemoryNotifier(NotificationSink):
    """Keeps every notification in a list."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    async def notify(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> None:
        self.notifications.append(Notification(message, Severity(severity), duration_ms))

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def messages(self, severity: Severity | None = None) -> list[str]:
        return [
            n.message
            for n in self.notifications
            if severity is None or n.severity == severity
        ]

    def clear(self) -> None:
        self.notifications.clear()


class TelegramNotifier(NotificationSink):
    """Pushes notifications to a Telegram chat.

    Delivery is best effort: a failed send is logged and dropped.
    """

    def __init__(self, bot: Bot, chat_id: int, min_severity: Severity = Severity.INFO) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self._min_level = _LOG_LEVELS[min_severity]

    @staticmethod
    def render(message: str, severity: Severity) -> str:
        return f"{_TELEGRAM_PREFIX[severity]} {html.escape(message)}"

    async def notify(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> None:
        severity = Severity(severity)
        if _LOG_LEVELS[severity] < self._min_level:
            return
        try:
            await self.bot.send_message(
                self.chat_id,
                self.render(message, severity),
                parse_mode="HTML",
            )
        except Exception as e:
            logger.warning("Telegram notification to %s failed: %s", self.chat_id, e)

    async def close(self) -> None:
        await self.bot.session.close()


class FanoutNotifier(NotificationSink):
    """Delivers each notification to every wrapped sink in order."""

    def __init__(self, sinks: Iterable[NotificationSink]) -> None:
        self.sinks = list(sinks)

    async def notify(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> None:
        for sink in self.sinks:
            await sink.notify(message, severity, duration_ms)
