"""Shared helpers for cart reconciliation and order totals."""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from storefront.domain.models import (
    Amount,
    LineItem,
    OrderSummary,
    Product,
    RawCartEntry,
    coerce_cart_entry,
)

SHIPPING_COST = 0


def reconcile(raw_cart: Iterable[Any], catalog: Iterable[Product]) -> list[LineItem]:
    """Join raw cart entries against the catalog, keeping cart order.

    Entries whose product is missing from ``catalog`` (removed after being
    carted) or that are malformed are skipped.
    """
    products = {product.id: product for product in catalog if isinstance(product, Product)}
    if not products:
        return []

    items: list[LineItem] = []
    for raw in raw_cart:
        entry = raw if isinstance(raw, RawCartEntry) else coerce_cart_entry(raw)
        if entry is None:
            continue
        product = products.get(entry.product_id)
        if product is None:
            continue
        items.append(LineItem.from_product(product, entry.quantity))
    return items


def compute_subtotal(line_items: Iterable[LineItem]) -> Amount:
    total: Amount = 0
    for item in line_items:
        total += item.unit_cost * item.quantity
    return total


def count_items(line_items: Sequence[LineItem]) -> int:
    return len(line_items)


def order_summary(line_items: Sequence[LineItem], shipping: Amount = SHIPPING_COST) -> OrderSummary:
    subtotal = compute_subtotal(line_items)
    return OrderSummary(
        products=count_items(line_items),
        subtotal=subtotal,
        shipping=shipping,
        total=subtotal + shipping,
    )
