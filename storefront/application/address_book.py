"""Use cases: list, add, delete and select shipping addresses."""
from __future__ import annotations

import logging

from storefront.core.exceptions import ApiException, BackendError
from storefront.core.notifications import WARNING_DURATION_MS, NotificationSink, Severity
from storefront.domain.address_selection import AddressSelector
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import SessionStore, TOKEN_KEY

logger = logging.getLogger(__name__)

_BACKEND_HINT = "Check that the backend is running, reachable and returns valid JSON."
FETCH_FAILED_MESSAGE = f"Could not fetch addresses. {_BACKEND_HINT}"
ADD_FAILED_MESSAGE = f"Could not add this address. {_BACKEND_HINT}"
DELETE_FAILED_MESSAGE = f"Could not delete this address. {_BACKEND_HINT}"
EMPTY_ADDRESS_MESSAGE = "Address cannot be empty"


class AddressBook:
    """Keeps the address selector in sync with the backend's address list."""

    def __init__(
        self,
        client: StorefrontApiClient,
        session_store: SessionStore,
        notifier: NotificationSink,
        selector: AddressSelector,
    ) -> None:
        self.client = client
        self.session_store = session_store
        self.notifier = notifier
        self.selector = selector

    async def _report(self, exc: ApiException, transport_message: str) -> None:
        if isinstance(exc, BackendError):
            await self.notifier.notify(exc.message, Severity.ERROR)
        else:
            await self.notifier.notify(transport_message, Severity.ERROR)

    async def refresh(self) -> bool:
        token = self.session_store.get(TOKEN_KEY)
        if not token:
            return False
        try:
            addresses = await self.client.get_addresses(token)
        except ApiException as exc:
            await self._report(exc, FETCH_FAILED_MESSAGE)
            return False
        self.selector.load(addresses)
        return True

    async def add(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            await self.notifier.notify(EMPTY_ADDRESS_MESSAGE, Severity.WARNING, WARNING_DURATION_MS)
            return False
        token = self.session_store.get(TOKEN_KEY)
        if not token:
            return False
        try:
            addresses = await self.client.add_address(token, text)
        except ApiException as exc:
            await self._report(exc, ADD_FAILED_MESSAGE)
            return False
        self.selector.add(addresses)
        logger.info("address added, %d on file", len(addresses))
        return True

    async def delete(self, address_id: str) -> bool:
        token = self.session_store.get(TOKEN_KEY)
        if not token:
            return False
        try:
            addresses = await self.client.delete_address(token, address_id)
        except ApiException as exc:
            await self._report(exc, DELETE_FAILED_MESSAGE)
            return False
        self.selector.remove(address_id, addresses)
        logger.info("address %s deleted, %d on file", address_id, len(addresses))
        return True

    def select(self, address_id: str) -> bool:
        return self.selector.select(address_id)
