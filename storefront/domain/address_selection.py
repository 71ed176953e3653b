"""In-memory shipping address list and the single selected address."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from storefront.domain.models import Address

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AddressSelection:
    addresses: tuple[Address, ...] = ()
    selected_id: str | None = None

    def contains(self, address_id: str | None) -> bool:
        return address_id is not None and any(a.id == address_id for a in self.addresses)


class AddressSelector:
    """Holds the cached address list (server order) and at most one selection.

    The server is the source of truth: add/remove adopt the authoritative list
    returned by the backend instead of patching the local cache.
    """

    def __init__(self) -> None:
        self._addresses: tuple[Address, ...] = ()
        self._selected_id: str | None = None

    @property
    def addresses(self) -> tuple[Address, ...]:
        return self._addresses

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected(self) -> Address | None:
        for address in self._addresses:
            if address.id == self._selected_id:
                return address
        return None

    def snapshot(self) -> AddressSelection:
        return AddressSelection(self._addresses, self._selected_id)

    def load(self, addresses: Iterable[Address]) -> None:
        self._addresses = tuple(addresses)
        if not self.snapshot().contains(self._selected_id):
            self._selected_id = None

    def select(self, address_id: str) -> bool:
        if not self.snapshot().contains(address_id):
            logger.debug("Ignoring selection of unknown address %s", address_id)
            return False
        self._selected_id = address_id
        return True

    def add(self, addresses_after_add: Iterable[Address]) -> None:
        self.load(addresses_after_add)

    def remove(self, address_id: str, addresses_after_delete: Iterable[Address]) -> None:
        if address_id == self._selected_id:
            self._selected_id = None
        self.load(addresses_after_delete)

    def clear(self) -> None:
        self._addresses = ()
        self._selected_id = None
