"""Checkout page load: catalog, cart and addresses fetched concurrently."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from storefront.core.exceptions import ApiException, BackendError
from storefront.core.notifications import NotificationSink, Severity
from storefront.domain.address_selection import AddressSelector
from storefront.domain.cart_math import compute_subtotal, order_summary, reconcile
from storefront.domain.models import (
    Address,
    Amount,
    LineItem,
    OrderSummary,
    Product,
    RawCartEntry,
)
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import SessionStore, read_session

logger = logging.getLogger(__name__)

_BACKEND_HINT = "Check that the backend is running, reachable and returns valid JSON."
PRODUCTS_FETCH_MESSAGE = f"Could not fetch products. {_BACKEND_HINT}"
CART_FETCH_MESSAGE = f"Could not fetch cart details. {_BACKEND_HINT}"
ADDRESSES_FETCH_MESSAGE = f"Could not fetch addresses. {_BACKEND_HINT}"


@dataclass
class CheckoutView:
    products: list[Product] = field(default_factory=list)
    line_items: list[LineItem] = field(default_factory=list)
    subtotal: Amount = 0
    summary: OrderSummary | None = None
    balance: Amount = 0

    @property
    def complete(self) -> bool:
        return self.summary is not None


class CheckoutPage:
    """Loads everything the checkout view needs.

    Line items are built only when both the catalog and the cart arrived; a
    half-loaded page shows an empty cart rather than a partial one.
    """

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

    async def _fetch_products(self) -> list[Product] | None:
        try:
            return await self.client.get_products()
        except BackendError as exc:
            await self.notifier.notify(exc.message, Severity.ERROR)
        except ApiException:
            await self.notifier.notify(PRODUCTS_FETCH_MESSAGE, Severity.ERROR)
        return None

    async def _fetch_cart(self, token: str | None) -> list[RawCartEntry] | None:
        if not token:
            return None
        try:
            return await self.client.get_cart(token)
        except ApiException:
            await self.notifier.notify(CART_FETCH_MESSAGE, Severity.ERROR)
        return None

    async def _fetch_addresses(self, token: str | None) -> list[Address] | None:
        if not token:
            return None
        try:
            return await self.client.get_addresses(token)
        except ApiException:
            await self.notifier.notify(ADDRESSES_FETCH_MESSAGE, Severity.ERROR)
        return None

    async def load(self) -> CheckoutView:
        session = read_session(self.session_store)
        token = session.token if session else None

        products, cart, addresses = await asyncio.gather(
            self._fetch_products(),
            self._fetch_cart(token),
            self._fetch_addresses(token),
        )

        if addresses is not None:
            self.selector.load(addresses)

        view = CheckoutView(
            products=products or [],
            balance=session.balance if session else 0,
        )
        if products is None or cart is None:
            logger.info(
                "checkout page incomplete: products=%s cart=%s",
                products is not None, cart is not None,
            )
            return view

        view.line_items = reconcile(cart, products)
        view.subtotal = compute_subtotal(view.line_items)
        view.summary = order_summary(view.line_items)
        if len(view.line_items) != len(cart):
            logger.info(
                "dropped %d cart entries missing from the catalog",
                len(cart) - len(view.line_items),
            )
        return view
