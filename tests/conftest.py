"""Shared pytest fixtures: fake REST backend, session store and sinks."""
from __future__ import annotations

import copy
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from storefront.core.navigation import MemoryNavigator
from storefront.core.notifications import MemoryNotifier
from storefront.domain.address_selection import AddressSelector
from storefront.domain.models import Address, Product, RawCartEntry
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import MemorySessionStore, persist_login

TOKEN = "tok-123"

PRODUCTS_PAYLOAD: list[dict[str, Any]] = [
    {
        "_id": "p1",
        "name": "Tan Leatherette Weekender Duffle",
        "category": "Fashion",
        "cost": 150,
        "rating": 4,
        "image": "https://img.example/duffle.png",
    },
    {
        "_id": "p2",
        "name": "The Minimalist Slim Leather Watch",
        "category": "Electronics",
        "cost": 60,
        "rating": 5,
        "image": "https://img.example/watch.png",
    },
    {
        "_id": "p3",
        "name": "Atomberg 1200mm BLDC Fan",
        "category": "Home & Kitchen",
        "cost": 40,
        "rating": 3,
        "image": "https://img.example/fan.png",
    },
]

CART_PAYLOAD: list[dict[str, Any]] = [
    {"productId": "p2", "qty": 2},
    {"productId": "p1", "qty": 1},
]

ADDRESSES_PAYLOAD: list[dict[str, Any]] = [
    {"_id": "a1", "address": "12 Residency Road, Bengaluru"},
    {"_id": "a2", "address": "7 Marine Drive, Mumbai"},
]


class FakeBackend:
    """In-process stand-in for the storefront REST API."""

    def __init__(self) -> None:
        self.token = TOKEN
        self.products: Any = copy.deepcopy(PRODUCTS_PAYLOAD)
        self.cart: Any = copy.deepcopy(CART_PAYLOAD)
        self.addresses: list[dict[str, Any]] = copy.deepcopy(ADDRESSES_PAYLOAD)
        self.users = {"crio.do": ("learnwithcrio", 5000)}
        self.checkout_calls: list[dict[str, Any]] = []
        self.checkout_error: tuple[int, dict[str, Any]] | None = None
        self.products_error: tuple[int, dict[str, Any]] | None = None
        self.raw_products_body: str | bytes | None = None
        self.raw_checkout_body: str | None = None
        self.requests: list[tuple[str, str]] = []
        self._next_address = 100

    def _authorized(self, request: web.Request) -> bool:
        return request.headers.get("Authorization") == f"Bearer {self.token}"

    @staticmethod
    def _unauthorized() -> web.Response:
        return web.json_response(
            {"success": False, "message": "Protected route, Oauth2 Bearer token not found"},
            status=401,
        )

    async def login(self, request: web.Request) -> web.Response:
        body = await request.json()
        user = self.users.get(body.get("username"))
        if not user or user[0] != body.get("password"):
            return web.json_response({"success": False, "message": "Password is incorrect"}, status=400)
        return web.json_response(
            {"success": True, "token": self.token, "username": body["username"], "balance": user[1]}
        )

    async def products_handler(self, request: web.Request) -> web.Response:
        if self.products_error:
            status, body = self.products_error
            return web.json_response(body, status=status)
        if isinstance(self.raw_products_body, bytes):
            return web.Response(body=self.raw_products_body, content_type="application/json")
        if self.raw_products_body is not None:
            return web.Response(text=self.raw_products_body, content_type="application/json")
        return web.json_response(self.products)

    async def cart_handler(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        return web.json_response(self.cart)

    async def checkout_handler(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        body = await request.json()
        self.checkout_calls.append(body)
        if self.checkout_error:
            status, error_body = self.checkout_error
            return web.json_response(error_body, status=status)
        if self.raw_checkout_body is not None:
            return web.Response(text=self.raw_checkout_body, content_type="text/plain")
        return web.json_response({"success": True})

    async def list_addresses(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        return web.json_response(self.addresses)

    async def add_address(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        body = await request.json()
        text = body.get("address") or ""
        if len(text) < 20:
            return web.json_response(
                {"success": False, "message": "Address should be greater than 20 characters"},
                status=400,
            )
        self.addresses.append({"_id": f"a{self._next_address}", "address": text})
        self._next_address += 1
        return web.json_response(self.addresses)

    async def delete_address(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        address_id = request.match_info["address_id"]
        remaining = [a for a in self.addresses if a["_id"] != address_id]
        if len(remaining) == len(self.addresses):
            return web.json_response(
                {"success": False, "message": "Address to delete was not found"}, status=404
            )
        self.addresses = remaining
        return web.json_response(self.addresses)

    def build_app(self) -> web.Application:
        @web.middleware
        async def record(request: web.Request, handler):
            self.requests.append((request.method, request.path))
            return await handler(request)

        app = web.Application(middlewares=[record])
        app.router.add_post("/api/v1/auth/login", self.login)
        app.router.add_get("/api/v1/products", self.products_handler)
        app.router.add_get("/api/v1/cart", self.cart_handler)
        app.router.add_post("/api/v1/cart/checkout", self.checkout_handler)
        app.router.add_get("/api/v1/user/addresses", self.list_addresses)
        app.router.add_post("/api/v1/user/addresses", self.add_address)
        app.router.add_delete("/api/v1/user/addresses/{address_id}", self.delete_address)
        return app


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
async def api_client(backend: FakeBackend):
    """StorefrontApiClient pointed at a running FakeBackend."""
    server = TestServer(backend.build_app())
    await server.start_server()
    client = StorefrontApiClient(str(server.make_url("/api/v1")), timeout=5)
    try:
        yield client
    finally:
        await client.close()
        await server.close()


@pytest.fixture()
async def dead_client():
    """Client whose backend refuses connections."""
    client = StorefrontApiClient("http://127.0.0.1:1/api/v1", timeout=2)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture()
def products() -> list[Product]:
    return [Product.model_validate(p) for p in PRODUCTS_PAYLOAD]


@pytest.fixture()
def raw_cart() -> list[RawCartEntry]:
    return [RawCartEntry.model_validate(e) for e in CART_PAYLOAD]


@pytest.fixture()
def addresses() -> list[Address]:
    return [Address.model_validate(a) for a in ADDRESSES_PAYLOAD]


@pytest.fixture()
def session_store() -> MemorySessionStore:
    store = MemorySessionStore()
    persist_login(store, TOKEN, "crio.do", 500)
    return store


@pytest.fixture()
def notifier() -> MemoryNotifier:
    return MemoryNotifier()


@pytest.fixture()
def navigator() -> MemoryNavigator:
    return MemoryNavigator()


@pytest.fixture()
def selector() -> AddressSelector:
    return AddressSelector()
