"""Navigation signals emitted by the checkout and login flows."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

HOME_PATH = "/"
THANKS_PATH = "/thanks"


@dataclass(frozen=True)
class NavigationEvent:
    path: str
    state: dict[str, Any] = field(default_factory=dict)


class Navigator(ABC):
    """Receives "go to this view" requests from the core."""

    @abstractmethod
    def push(self, path: str, state: dict[str, Any] | None = None) -> None:
        pass


class MemoryNavigator(Navigator):
    """Records the navigation history instead of routing anywhere."""

    def __init__(self) -> None:
        self.history: list[NavigationEvent] = []

    def push(self, path: str, state: dict[str, Any] | None = None) -> None:
        logger.debug("navigate -> %s %s", path, state or {})
        self.history.append(NavigationEvent(path, dict(state or {})))

    @property
    def current(self) -> NavigationEvent | None:
        return self.history[-1] if self.history else None
