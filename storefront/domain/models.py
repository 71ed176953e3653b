"""Storefront boundary schemas and parsing helpers.

Backend payloads are decoded JSON of unknown shape. Everything entering the
core goes through the ``parse_*`` helpers, which keep well-formed entries and
drop the rest instead of failing the whole response.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    ValidationError,
)

logger = logging.getLogger(__name__)

Amount = int | float
NonNegativeAmount = NonNegativeInt | NonNegativeFloat

M = TypeVar("M", bound=BaseModel)


class _WireModel(BaseModel):
    """Immutable model that reads backend field names and accepts python names too."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Product(_WireModel):
    """Product available to buy."""

    id: str = Field(..., alias="_id", min_length=1, description="Unique product ID")
    name: str = Field(..., description="Product title")
    category: str = Field("", description="Product category")
    unit_cost: NonNegativeAmount = Field(..., alias="cost", description="Price of one unit")
    rating: int = Field(0, ge=0, le=5, description="Aggregate rating out of five")
    image_url: str = Field("", alias="image", description="Product image URL")


class RawCartEntry(_WireModel):
    """Sparse server-side cart entry."""

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = Field(..., alias="qty", gt=0)


class LineItem(_WireModel):
    """Cart entry enriched with the full product attributes."""

    product_id: str
    name: str
    category: str
    unit_cost: Amount
    rating: int
    image_url: str
    quantity: int

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> LineItem:
        return cls(
            product_id=product.id,
            name=product.name,
            category=product.category,
            unit_cost=product.unit_cost,
            rating=product.rating,
            image_url=product.image_url,
            quantity=quantity,
        )

    @property
    def line_total(self) -> Amount:
        return self.unit_cost * self.quantity


class Address(_WireModel):
    """Saved shipping address."""

    id: str = Field(..., alias="_id", min_length=1)
    text: str = Field(..., alias="address")


class LoginResponse(_WireModel):
    token: str = Field(..., min_length=1)
    username: str
    balance: NonNegativeAmount


@dataclass(frozen=True, slots=True)
class Session:
    """Authenticated user's token, username and wallet balance."""

    token: str
    username: str | None
    balance: Amount


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    selected_address_id: str
    line_items: tuple[LineItem, ...]
    subtotal: Amount


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    address_id: str
    amount_charged: Amount
    balance_after: Amount


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """Order details block: product count, subtotal, shipping and total."""

    products: int
    subtotal: Amount
    shipping: Amount
    total: Amount


def _parse_list(payload: Any, model: type[M]) -> list[M]:
    if not isinstance(payload, list):
        if payload is not None:
            logger.debug("Expected a list of %s, got %s", model.__name__, type(payload).__name__)
        return []

    parsed: list[M] = []
    for raw in payload:
        if isinstance(raw, model):
            parsed.append(raw)
            continue
        if not isinstance(raw, dict):
            logger.debug("Dropping non-object %s entry: %r", model.__name__, raw)
            continue
        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as exc:
            logger.debug("Dropping malformed %s entry %r: %s", model.__name__, raw, exc)
    return parsed


def parse_products(payload: Any) -> list[Product]:
    return _parse_list(payload, Product)


def parse_cart(payload: Any) -> list[RawCartEntry]:
    return _parse_list(payload, RawCartEntry)


def parse_addresses(payload: Any) -> list[Address]:
    return _parse_list(payload, Address)


def coerce_cart_entry(raw: Any) -> RawCartEntry | None:
    """Return a RawCartEntry for ``raw`` or None when it is not one."""
    entries = parse_cart([raw])
    return entries[0] if entries else None


def parse_amount(value: Any) -> Amount | None:
    """Parse a stored money amount ("400", "12.5", 7) into a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def format_amount(value: Amount) -> str:
    """Serialize an amount for the string-only session store."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
